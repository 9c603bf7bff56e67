"""Domain models for bulk agency import."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class ParsedAgencyRow(BaseModel):
    """One agency row parsed from an uploaded CSV/Excel file."""

    name: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[str] = None
    employee_count: Optional[str] = None
    company_size: Optional[str] = None
    offers_per_diem: Optional[bool] = None
    is_union: Optional[bool] = None
    trades: Optional[List[str]] = None
    regions: Optional[List[str]] = None
    row_number: int = Field(..., alias="_rowNumber")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class RowStatus(str, Enum):
    """Display status of a preview row."""

    VALID = "valid"
    INVALID = "invalid"
    WARNING = "warning"


class RowValidationResult(BaseModel):
    """Server-side (or local) validation result for one row."""

    row_number: int = Field(..., alias="rowNumber")
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    data: ParsedAgencyRow

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True

    @property
    def status(self) -> RowStatus:
        if not self.valid:
            return RowStatus.INVALID
        if self.warnings:
            return RowStatus.WARNING
        return RowStatus.VALID

    @property
    def has_details(self) -> bool:
        return bool(self.errors or self.warnings)


class ValidationSummary(BaseModel):
    """Aggregate counts for a validation pass."""

    total: int = 0
    valid: int = 0
    invalid: int = 0
    with_warnings: int = Field(0, alias="withWarnings")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class ImportOutcome(str, Enum):
    """Per-row result of an import."""

    CREATED = "created"
    SKIPPED = "skipped"
    FAILED = "failed"


class ImportRowResult(BaseModel):
    """Result of importing one row."""

    row_number: int = Field(..., alias="rowNumber")
    status: ImportOutcome
    agency_id: Optional[str] = Field(None, alias="agencyId")
    agency_name: str = Field("", alias="agencyName")
    reason: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class ImportSummary(BaseModel):
    """Aggregate counts for an import."""

    total: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0


class BulkImportResult(BaseModel):
    """Response of the bulk import endpoint."""

    results: List[ImportRowResult] = Field(default_factory=list)
    summary: ImportSummary = Field(default_factory=ImportSummary)
