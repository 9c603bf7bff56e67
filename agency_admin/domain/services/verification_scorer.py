"""Verification scoring for agency claim requests."""

import math
from typing import List, Optional

from ..models.claim import ClaimRequest, VerificationMethod
from ..models.verification import (
    CheckOutcome,
    DomainComparison,
    VerificationCheck,
    VerificationLabel,
    VerificationSummary,
)
from .email_domain import extract_email_domain, extract_website_domain, is_free_email_domain

TOTAL_CHECKS = 3
INVALID_DOMAIN = "invalid"

LOW_SCORE_RECOMMENDATION = (
    "Claims with lower verification scores may require additional manual "
    "verification through external sources (agency website, LinkedIn, phone call)."
)


def score_percentage(passed_checks: int, total_checks: int = TOTAL_CHECKS) -> int:
    """Percentage of passed checks, rounded half-up."""
    return int(math.floor(passed_checks / total_checks * 100 + 0.5))


def classify(percentage: int) -> VerificationLabel:
    """Map a percentage onto the reviewer-facing label."""
    if percentage == 100:
        return VerificationLabel.FULLY_VERIFIED
    if percentage >= 66:
        return VerificationLabel.PARTIALLY_VERIFIED
    return VerificationLabel.NEEDS_REVIEW


def _email_check(email_domain_verified: bool) -> VerificationCheck:
    if email_domain_verified:
        return VerificationCheck(
            label="Email Domain Match",
            outcome=CheckOutcome.PASS,
            description="Business email domain matches agency website",
        )
    return VerificationCheck(
        label="Email Domain Match",
        outcome=CheckOutcome.FAIL,
        description="Business email domain does not match agency website",
    )


def _phone_check(phone_provided: bool) -> VerificationCheck:
    return VerificationCheck(
        label="Phone Number Provided",
        outcome=CheckOutcome.PASS if phone_provided else CheckOutcome.FAIL,
        description=(
            "Contact phone number was provided"
            if phone_provided
            else "No phone number provided"
        ),
    )


def _position_check(position_provided: bool) -> VerificationCheck:
    return VerificationCheck(
        label="Position/Title Provided",
        outcome=CheckOutcome.PASS if position_provided else CheckOutcome.FAIL,
        description=(
            "Professional position/title specified"
            if position_provided
            else "No position or title provided"
        ),
    )


def _summarize(
    checks: List[VerificationCheck],
    verification_method: VerificationMethod,
    domains: Optional[DomainComparison] = None,
) -> VerificationSummary:
    passed = sum(1 for check in checks if check.passed)
    percentage = score_percentage(passed, len(checks))
    return VerificationSummary(
        checks=checks,
        passed_checks=passed,
        total_checks=len(checks),
        score_percentage=percentage,
        label=classify(percentage),
        verification_method=verification_method,
        recommendation=LOW_SCORE_RECOMMENDATION if percentage < 100 else None,
        domains=domains,
    )


def score_verification(
    email_domain_verified: bool,
    phone_provided: bool,
    position_provided: bool,
    verification_method: VerificationMethod = VerificationMethod.EMAIL,
) -> VerificationSummary:
    """Score the three verification signals of a claim.

    Args:
        email_domain_verified: Business email domain matches the agency website
        phone_provided: A contact phone number was given
        position_provided: A position/title was given
        verification_method: Requested verification method, for display

    Returns:
        Checklist, aggregate score and label
    """
    checks = [
        _email_check(email_domain_verified),
        _phone_check(phone_provided),
        _position_check(position_provided),
    ]
    return _summarize(checks, verification_method)


def _domain_or_invalid(extract, value: Optional[str]) -> str:
    if not value:
        return INVALID_DOMAIN
    try:
        return extract(value)
    except ValueError:
        return INVALID_DOMAIN


def score_verification_with_domains(
    business_email: str,
    agency_website: Optional[str],
    email_domain_verified: bool,
    phone_provided: bool,
    position_provided: bool,
    verification_method: VerificationMethod = VerificationMethod.EMAIL,
) -> VerificationSummary:
    """Score a claim and show the domains behind the email check.

    The email check becomes REVIEW when the stored flag is false but the
    requester used a free-mail address. Domains that cannot be extracted are
    shown as ``"invalid"``.
    """
    email_domain = _domain_or_invalid(extract_email_domain, business_email)
    website_domain = _domain_or_invalid(extract_website_domain, agency_website)
    free_email = is_free_email_domain(business_email)

    if email_domain_verified:
        email_check = _email_check(True)
    elif free_email:
        email_check = VerificationCheck(
            label="Email Domain Match",
            outcome=CheckOutcome.REVIEW,
            description=(
                f"Business email uses a free provider ({email_domain}); "
                "verify the requester through other sources"
            ),
        )
    else:
        email_check = _email_check(False)

    checks = [email_check, _phone_check(phone_provided), _position_check(position_provided)]
    domains = DomainComparison(
        email_domain=email_domain,
        website_domain=website_domain,
        is_free_email=free_email,
    )
    return _summarize(checks, verification_method, domains)


def score_claim(claim: ClaimRequest, with_domains: bool = False) -> VerificationSummary:
    """Score a claim request."""
    if with_domains:
        return score_verification_with_domains(
            business_email=claim.business_email,
            agency_website=claim.agency.website,
            email_domain_verified=claim.email_domain_verified,
            phone_provided=claim.phone_provided,
            position_provided=claim.position_provided,
            verification_method=claim.verification_method,
        )
    return score_verification(
        email_domain_verified=claim.email_domain_verified,
        phone_provided=claim.phone_provided,
        position_provided=claim.position_provided,
        verification_method=claim.verification_method,
    )
