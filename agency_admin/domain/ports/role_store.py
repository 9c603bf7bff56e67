"""Data-access interface for role changes and their audit trail."""

from typing import List, Optional, Protocol

from ..models.user import RoleChangeAudit, UserRole


class RoleStoreError(Exception):
    """Error reported by the role data store."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class RoleDataAccess(Protocol):
    """Protocol for the backend-as-a-service holding user roles."""

    async def fetch_audit_log(self, user_id: str) -> List[RoleChangeAudit]:
        """Get a user's role changes, newest first."""
        ...

    async def change_user_role(
        self,
        target_user_id: str,
        new_role: UserRole,
        admin_notes: Optional[str] = None,
    ) -> None:
        """Change a user's role and record the audit entry."""
        ...
