"""Domain models for user administration."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, Enum):
    """Platform roles."""

    USER = "user"
    AGENCY_OWNER = "agency_owner"
    ADMIN = "admin"

    @property
    def display_name(self) -> str:
        return {
            UserRole.ADMIN: "Admin",
            UserRole.AGENCY_OWNER: "Agency Owner",
        }.get(self, "User")


class AdminUser(BaseModel):
    """A user row in the admin user table."""

    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


class AdminProfile(BaseModel):
    """Profile of the admin who made a role change."""

    full_name: Optional[str] = None
    email: Optional[str] = None


class RoleChangeAudit(BaseModel):
    """One entry of a user's role history."""

    id: str
    user_id: str
    admin_id: Optional[str] = None
    old_role: UserRole
    new_role: UserRole
    changed_at: datetime
    notes: Optional[str] = None
    admin_profile: Optional[AdminProfile] = None


class ClaimedAgency(BaseModel):
    """Agency blocking a user's deletion."""

    id: str
    name: str
    slug: Optional[str] = None
