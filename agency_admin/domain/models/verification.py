"""Domain models for claim verification scoring."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .claim import VerificationMethod


class CheckOutcome(str, Enum):
    """Outcome of a single verification check."""

    PASS = "PASS"
    REVIEW = "REVIEW"  # Only produced by the domain-aware email check
    FAIL = "FAIL"


class VerificationLabel(str, Enum):
    """Aggregate verification status shown to reviewers."""

    FULLY_VERIFIED = "Fully Verified"  # 100%
    PARTIALLY_VERIFIED = "Partially Verified"  # 66-99%
    NEEDS_REVIEW = "Needs Review"  # below 66%


class VerificationCheck(BaseModel):
    """One line of the verification checklist."""

    label: str = Field(..., description="Check name")
    outcome: CheckOutcome = Field(..., description="PASS/REVIEW/FAIL")
    description: str = Field(..., description="One-line explanation for the reviewer")

    @property
    def passed(self) -> bool:
        return self.outcome == CheckOutcome.PASS


class DomainComparison(BaseModel):
    """Email and website domains extracted for display."""

    email_domain: str
    website_domain: str
    is_free_email: bool = False


class VerificationSummary(BaseModel):
    """Result of scoring a claim's verification signals."""

    checks: List[VerificationCheck]
    passed_checks: int
    total_checks: int
    score_percentage: int
    label: VerificationLabel
    verification_method: VerificationMethod
    recommendation: Optional[str] = None
    domains: Optional[DomainComparison] = None

    @property
    def score_text(self) -> str:
        """Aggregate string, e.g. ``2/3 checks passed (67%)``."""
        return (
            f"{self.passed_checks}/{self.total_checks} checks passed "
            f"({self.score_percentage}%)"
        )
