"""Domain models for agency administration."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

EMPLOYEE_COUNT_VALUES = (
    "1-10",
    "11-50",
    "51-100",
    "101-200",
    "201-500",
    "501-1000",
    "1001+",
)

COMPANY_SIZE_VALUES = ("Small", "Medium", "Large", "Enterprise")


class Tag(BaseModel):
    """A trade or region attached to an agency."""

    id: str
    name: str


class Agency(BaseModel):
    """Agency record as returned by the admin API."""

    id: str
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[int] = None
    employee_count: Optional[str] = None
    company_size: Optional[str] = None
    offers_per_diem: bool = False
    is_union: bool = False
    verified: bool = False
    logo_url: Optional[str] = None
    trades: List[Tag] = Field(default_factory=list)
    regions: List[Tag] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("founded_year", mode="before")
    @classmethod
    def _blank_year_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class AgencyFormData(BaseModel):
    """Fields an admin edits in the agency form."""

    name: str
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[str] = None
    employee_count: Optional[str] = None
    company_size: Optional[str] = None
    offers_per_diem: bool = False
    is_union: bool = False
    verified: bool = False

    @field_validator("founded_year", mode="before")
    @classmethod
    def _year_as_text(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class LogoUpload(BaseModel):
    """A logo file waiting to be uploaded after the agency is saved."""

    filename: str
    content: bytes
    content_type: str = "image/png"


class ComplianceType(str, Enum):
    """Compliance items tracked per agency."""

    OSHA_CERTIFIED = "osha_certified"
    DRUG_TESTING = "drug_testing"
    BACKGROUND_CHECKS = "background_checks"
    WORKERS_COMP = "workers_comp"
    GENERAL_LIABILITY = "general_liability"
    BONDING = "bonding"

    @property
    def display_name(self) -> str:
        return {
            ComplianceType.OSHA_CERTIFIED: "OSHA Certified",
            ComplianceType.DRUG_TESTING: "Drug Testing Policy",
            ComplianceType.BACKGROUND_CHECKS: "Background Checks",
            ComplianceType.WORKERS_COMP: "Workers' Compensation",
            ComplianceType.GENERAL_LIABILITY: "General Liability Insurance",
            ComplianceType.BONDING: "Bonding/Surety Bond",
        }[self]


class ComplianceItem(BaseModel):
    """One compliance item with its verification fields."""

    type: ComplianceType
    is_active: bool = Field(False, alias="isActive")
    expiration_date: Optional[date] = Field(None, alias="expirationDate")
    is_verified: bool = Field(False, alias="isVerified")
    verified_by: Optional[str] = Field(None, alias="verifiedBy")
    verified_at: Optional[datetime] = Field(None, alias="verifiedAt")
    notes: Optional[str] = None
    document_url: Optional[str] = Field(None, alias="documentUrl")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class ComplianceAction(str, Enum):
    """Outcome an admin records for an uploaded compliance document."""

    VERIFY = "verify"
    REJECT = "reject"
