"""User administration endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ...domain.models.notification import Notification
from ...domain.models.user import AdminUser, RoleChangeAudit, UserRole
from ...domain.ports.role_store import RoleStoreError
from ...domain.services.user_admin_service import UserAdminService
from ...infrastructure.dependencies import get_notifier, get_user_admin_service
from ...infrastructure.notifications import CollectingNotifier

router = APIRouter(prefix="/console/users", tags=["users"])

logger = logging.getLogger(__name__)


class UserActionResponse(BaseModel):
    success: bool
    role: Optional[UserRole] = None
    notifications: List[Notification] = []


class RoleChangeRequest(BaseModel):
    """Role change for a user as currently shown in the table."""

    new_role: UserRole
    current_role: UserRole
    email: str
    full_name: Optional[str] = None
    notes: Optional[str] = None


@router.delete("/{user_id}", response_model=UserActionResponse)
async def delete_user(
    user_id: str,
    email: str = Query("", description="Shown in the success message"),
    full_name: Optional[str] = Query(None, description="Shown in the success message"),
    service: UserAdminService = Depends(get_user_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> UserActionResponse:
    """Delete a user account."""
    user = AdminUser(id=user_id, email=email or user_id, full_name=full_name)
    deleted = await service.delete_user(user)
    return UserActionResponse(success=deleted, notifications=notifier.notifications)


@router.post("/{user_id}/role", response_model=UserActionResponse)
async def change_role(
    user_id: str,
    request: RoleChangeRequest,
    service: UserAdminService = Depends(get_user_admin_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> UserActionResponse:
    """Change a user's role; the returned role is the one to display."""
    service.load_users([AdminUser(
        id=user_id,
        email=request.email,
        full_name=request.full_name,
        role=request.current_role,
    )])
    changed = await service.change_role(user_id, request.new_role, request.notes)
    user = service.users.get(user_id)
    return UserActionResponse(
        success=changed,
        role=user.role if user else request.current_role,
        notifications=notifier.notifications,
    )


@router.get("/{user_id}/role-history", response_model=List[RoleChangeAudit])
async def role_history(
    user_id: str,
    service: UserAdminService = Depends(get_user_admin_service),
) -> List[RoleChangeAudit]:
    """A user's role changes, newest first."""
    try:
        return await service.role_history(user_id)
    except RoleStoreError as e:
        logger.error(f"❌ Failed to load role history for {user_id}: {e.message}")
        raise HTTPException(status_code=502, detail=e.message or "Failed to load role history")
