"""Claim review endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ...domain.models.claim import ClaimRequest, StatusFilter, VerificationMethod
from ...domain.models.notification import Notification
from ...domain.models.verification import VerificationSummary
from ...domain.ports.admin_api import AdminAPIError, AdminAPIProvider
from ...domain.services.claim_events import ClaimEventBus
from ...domain.services.claim_review_service import (
    ClaimActionExecutor,
    ClaimDetailView,
    RejectionForm,
    build_detail_view,
)
from ...domain.services.claims_list_service import ClaimsListController, ClaimsListView
from ...domain.services.verification_scorer import (
    score_verification,
    score_verification_with_domains,
)
from ...infrastructure.dependencies import (
    get_admin_api,
    get_claim_executor,
    get_event_bus,
    get_notifier,
)
from ...infrastructure.notifications import CollectingNotifier

router = APIRouter(prefix="/console", tags=["claims"])

logger = logging.getLogger(__name__)


class ClaimsListResponse(BaseModel):
    """Claims table plus the notifications raised while loading it."""

    view: ClaimsListView
    notifications: List[Notification] = []


class ApproveClaimRequest(BaseModel):
    agency_name: str = Field("", description="Agency name, used in notifications")


class RejectClaimRequest(BaseModel):
    rejection_reason: str = Field(..., description="Reason sent to the requester (min. 20 characters)")
    agency_name: str = Field("", description="Agency name, used in notifications")


class ClaimActionResponse(BaseModel):
    success: bool
    notifications: List[Notification] = []


class VerificationScoreRequest(BaseModel):
    """Signals to score. Business email and website enable the domain-aware checklist."""

    email_domain_verified: bool
    phone_provided: bool
    position_provided: bool
    verification_method: VerificationMethod = VerificationMethod.EMAIL
    business_email: Optional[str] = None
    agency_website: Optional[str] = None


def _raise_for_api_error(e: AdminAPIError) -> None:
    raise HTTPException(
        status_code=e.status_code or 502,
        detail={"code": e.code, "message": e.message, "details": e.details},
    )


@router.get("/claims", response_model=ClaimsListResponse)
async def list_claims(
    page: int = Query(1, ge=1),
    status: StatusFilter = Query(StatusFilter.ALL),
    search: str = Query(""),
    admin_api: AdminAPIProvider = Depends(get_admin_api),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ClaimsListResponse:
    """Load one page of the claims table."""
    controller = ClaimsListController(admin_api, notifier)
    controller.page = page
    controller.status_filter = status
    controller.search = search
    await controller.load()
    return ClaimsListResponse(view=controller.view(), notifications=notifier.notifications)


@router.post("/claims/detail", response_model=ClaimDetailView)
async def claim_detail(claim: ClaimRequest, with_domains: bool = Query(False)) -> ClaimDetailView:
    """Build the detail view for a claim."""
    return build_detail_view(claim, with_domains=with_domains)


@router.post("/claims/{claim_id}/approve", response_model=ClaimActionResponse)
async def approve_claim(
    claim_id: str,
    request: Optional[ApproveClaimRequest] = None,
    executor: ClaimActionExecutor = Depends(get_claim_executor),
) -> ClaimActionResponse:
    """Approve a pending claim."""
    agency_name = request.agency_name if request else ""
    try:
        await executor.approve(claim_id, agency_name)
    except AdminAPIError as e:
        logger.error(f"❌ Approval of claim {claim_id} failed: {e.message}")
        _raise_for_api_error(e)

    return ClaimActionResponse(
        success=True,
        notifications=[Notification.success(
            "Claim Approved",
            f"{agency_name or 'The agency'} has been assigned to the requester.",
        )],
    )


@router.post("/claims/{claim_id}/reject", response_model=ClaimActionResponse)
async def reject_claim(
    claim_id: str,
    request: RejectClaimRequest,
    executor: ClaimActionExecutor = Depends(get_claim_executor),
) -> ClaimActionResponse:
    """Reject a pending claim with a reason of at least 20 characters."""
    form = RejectionForm()
    form.set_reason(request.rejection_reason)
    reason = form.submit()
    if reason is None:
        raise HTTPException(status_code=422, detail=form.error)

    try:
        await executor.reject(claim_id, reason, request.agency_name)
    except AdminAPIError as e:
        logger.error(f"❌ Rejection of claim {claim_id} failed: {e.message}")
        _raise_for_api_error(e)

    name = request.agency_name or "this agency"
    return ClaimActionResponse(
        success=True,
        notifications=[Notification.success(
            "Claim Rejected",
            f"The claim for {name} has been rejected.",
        )],
    )


@router.get("/claims/events")
async def claim_events(
    claim_id: Optional[str] = Query(None),
    event_bus: ClaimEventBus = Depends(get_event_bus),
) -> List[dict]:
    """Recent claim review events, newest last."""
    return [event.to_dict() for event in event_bus.get_events(claim_id=claim_id)]


@router.post("/verification/score", response_model=VerificationSummary)
async def score(request: VerificationScoreRequest) -> VerificationSummary:
    """Score a claim's verification signals."""
    if request.business_email:
        return score_verification_with_domains(
            business_email=request.business_email,
            agency_website=request.agency_website,
            email_domain_verified=request.email_domain_verified,
            phone_provided=request.phone_provided,
            position_provided=request.position_provided,
            verification_method=request.verification_method,
        )
    return score_verification(
        email_domain_verified=request.email_domain_verified,
        phone_provided=request.phone_provided,
        position_provided=request.position_provided,
        verification_method=request.verification_method,
    )
