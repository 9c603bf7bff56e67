"""Domain models for agency claim requests."""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)


class ClaimStatus(str, Enum):
    """Lifecycle states of a claim request."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"  # Set externally
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def display_name(self) -> str:
        """Human-readable status label."""
        return self.value.replace("_", " ").title()


class StatusFilter(str, Enum):
    """Status filter offered by the claims list."""

    ALL = "all"
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationMethod(str, Enum):
    """How the requester asked to be verified."""

    EMAIL = "email"
    PHONE = "phone"
    MANUAL = "manual"


class ClaimAgency(BaseModel):
    """Agency data joined onto a claim request."""

    id: str
    name: str
    slug: str
    logo_url: Optional[str] = None
    website: Optional[str] = None


class ClaimUser(BaseModel):
    """Requester profile joined onto a claim request."""

    id: str
    full_name: Optional[str] = None
    email: str


class ClaimRequest(BaseModel):
    """A user's request to be recognized as the owner of an agency."""

    id: str = Field(..., description="Opaque claim identifier")
    agency_id: str
    user_id: str
    status: ClaimStatus = ClaimStatus.PENDING
    business_email: str
    phone_number: Optional[str] = None
    position_title: Optional[str] = None
    verification_method: VerificationMethod = VerificationMethod.EMAIL
    email_domain_verified: bool = False
    additional_notes: Optional[str] = None
    rejection_reason: Optional[str] = Field(
        None, description="Only populated when the claim was rejected"
    )
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    agency: ClaimAgency
    user: ClaimUser

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "claim-123",
                "agency_id": "agency-456",
                "user_id": "user-789",
                "status": "pending",
                "business_email": "john@elitestaffing.com",
                "phone_number": "+15551234567",
                "position_title": "HR Manager",
                "verification_method": "email",
                "email_domain_verified": True,
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
                "agency": {"id": "agency-456", "name": "Elite Staffing", "slug": "elite-staffing"},
                "user": {"id": "user-789", "full_name": "John Doe", "email": "john@example.com"},
            }
        }

    @model_validator(mode="after")
    def _rejection_reason_only_when_rejected(self) -> "ClaimRequest":
        if self.rejection_reason and self.status != ClaimStatus.REJECTED:
            raise ValueError("rejection_reason is only allowed on rejected claims")
        return self

    @property
    def is_pending(self) -> bool:
        """Check if the claim can still be approved or rejected."""
        return self.status == ClaimStatus.PENDING

    @property
    def phone_provided(self) -> bool:
        return bool(self.phone_number)

    @property
    def position_provided(self) -> bool:
        return bool(self.position_title)


class Pagination(BaseModel):
    """Pagination summary returned by the claims list endpoint."""

    total: int = 0
    limit: int = 25
    offset: int = 0
    has_more: bool = Field(False, alias="hasMore")
    page: int = 1
    total_pages: int = Field(0, alias="totalPages")

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class ClaimsPage(BaseModel):
    """One page of claims as returned by `GET /api/admin/claims`."""

    data: List[ClaimRequest] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)

    @field_validator("data", mode="before")
    @classmethod
    def _skip_invalid_rows(cls, rows: Any) -> Any:
        if not isinstance(rows, list):
            return rows
        valid = []
        for row in rows:
            if isinstance(row, ClaimRequest):
                valid.append(row)
                continue
            try:
                valid.append(ClaimRequest.model_validate(row))
            except ValidationError as e:
                claim_id = row.get("id") if isinstance(row, dict) else None
                logger.warning(f"⚠️ Skipping invalid claim row {claim_id}: {e.error_count()} error(s)")
        return valid
