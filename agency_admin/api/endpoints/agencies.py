"""Agency administration endpoints."""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ...domain.models.agency import (
    Agency,
    AgencyFormData,
    ComplianceAction,
    ComplianceItem,
    ComplianceType,
    Tag,
)
from ...domain.models.notification import Notification
from ...domain.services.agency_admin_service import AgencyAdminService
from ...infrastructure.dependencies import get_agency_admin_service, get_notifier
from ...infrastructure.notifications import CollectingNotifier

router = APIRouter(prefix="/console/agencies", tags=["agencies"])

logger = logging.getLogger(__name__)


class AgencySaveRequest(BaseModel):
    """Agency form submission.

    ``existing`` is the agency as loaded before editing; trade and region
    ids are only sent when the selection differs from it.
    """

    form: AgencyFormData
    trades: List[Tag] = Field(default_factory=list)
    regions: List[Tag] = Field(default_factory=list)
    remove_logo: bool = False


class AgencyUpdateRequest(AgencySaveRequest):
    existing: Agency


class AgencySaveResponse(BaseModel):
    saved: bool
    agency: Optional[Agency] = None
    field_errors: Dict[str, str] = Field(default_factory=dict)
    logo_failed: bool = False
    notifications: List[Notification] = []


class ComplianceUpdateRequest(BaseModel):
    items: List[ComplianceItem]


class AgencyStatusRequest(BaseModel):
    active: bool


class AgencyStatusResponse(BaseModel):
    agency: Optional[Agency] = None
    notifications: List[Notification] = []


class ComplianceResponse(BaseModel):
    data: List[ComplianceItem] = []
    notifications: List[Notification] = []


class ComplianceVerifyRequest(BaseModel):
    """Admin decision on an uploaded compliance document."""

    agency_name: str
    compliance_type: ComplianceType = Field(..., alias="complianceType")
    action: ComplianceAction
    reason: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        """Pydantic model configuration."""
        populate_by_name = True


class ComplianceVerifyResponse(BaseModel):
    data: Optional[ComplianceItem] = None
    notifications: List[Notification] = []


@router.post("", response_model=AgencySaveResponse)
async def create_agency(
    request: AgencySaveRequest,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> AgencySaveResponse:
    """Create an agency."""
    outcome = await service.save_agency(
        request.form, trades=request.trades, regions=request.regions
    )
    return AgencySaveResponse(**outcome.model_dump(), notifications=notifier.notifications)


@router.patch("/{agency_id}", response_model=AgencySaveResponse)
async def update_agency(
    agency_id: str,
    request: AgencyUpdateRequest,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> AgencySaveResponse:
    """Update an agency, optionally removing its logo."""
    existing = request.existing.model_copy(update={"id": agency_id})
    outcome = await service.save_agency(
        request.form,
        trades=request.trades,
        regions=request.regions,
        existing=existing,
        remove_logo=request.remove_logo,
    )
    return AgencySaveResponse(**outcome.model_dump(), notifications=notifier.notifications)


@router.get("/{agency_id}/compliance", response_model=ComplianceResponse)
async def get_compliance(
    agency_id: str,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ComplianceResponse:
    """Load an agency's compliance items."""
    items = await service.load_compliance(agency_id)
    return ComplianceResponse(data=items, notifications=notifier.notifications)


@router.put("/{agency_id}/compliance", response_model=ComplianceResponse)
async def update_compliance(
    agency_id: str,
    request: ComplianceUpdateRequest,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ComplianceResponse:
    """Replace an agency's compliance items."""
    saved = await service.save_compliance(agency_id, request.items)
    return ComplianceResponse(data=saved or [], notifications=notifier.notifications)


@router.post("/{agency_id}/status", response_model=AgencyStatusResponse)
async def set_agency_status(
    agency_id: str,
    request: AgencyStatusRequest,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> AgencyStatusResponse:
    """Activate or deactivate an agency."""
    agency = await service.set_agency_status(agency_id, request.active)
    return AgencyStatusResponse(agency=agency, notifications=notifier.notifications)


@router.post("/{agency_id}/compliance/verify", response_model=ComplianceVerifyResponse)
async def verify_compliance(
    agency_id: str,
    request: ComplianceVerifyRequest,
    service: AgencyAdminService = Depends(get_agency_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ComplianceVerifyResponse:
    """Verify or reject an agency's compliance document."""
    item = await service.review_compliance_document(
        agency_id,
        request.agency_name,
        request.compliance_type,
        request.action,
        reason=request.reason,
        notes=request.notes,
    )
    return ComplianceVerifyResponse(data=item, notifications=notifier.notifications)
