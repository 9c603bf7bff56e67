"""User deletion, role changes and role history."""

import logging
from typing import Dict, List, Optional

from cachetools import TTLCache

from ..models.notification import Notification
from ..models.user import AdminUser, ClaimedAgency, RoleChangeAudit, UserRole
from ..ports.admin_api import AdminAPIError, AdminAPIProvider
from ..ports.notifier import Notifier
from ..ports.role_store import RoleDataAccess, RoleStoreError

logger = logging.getLogger(__name__)


def conflict_agencies(error: AdminAPIError) -> List[ClaimedAgency]:
    """Read ``details.claimed_agencies`` from a 409 response."""
    raw = error.details.get("claimed_agencies") or []
    return [ClaimedAgency(**agency) for agency in raw if isinstance(agency, dict)]


class UserAdminService:
    """Service for admin actions on user accounts.

    ``acting_user_id`` is the signed-in admin; they cannot delete their own
    account or change their own role. The users dict is the table state the
    optimistic role update writes to.
    """

    def __init__(
        self,
        admin_api: AdminAPIProvider,
        role_store: RoleDataAccess,
        notifier: Notifier,
        acting_user_id: Optional[str] = None,
        history_cache: Optional[TTLCache] = None,
    ):
        self.admin_api = admin_api
        self.role_store = role_store
        self.notifier = notifier
        self.acting_user_id = acting_user_id
        self.users: Dict[str, AdminUser] = {}
        self._history = history_cache if history_cache is not None else TTLCache(maxsize=256, ttl=300)

    def load_users(self, users: List[AdminUser]) -> None:
        self.users = {user.id: user for user in users}

    async def delete_user(self, user: AdminUser) -> bool:
        """Delete a user account. Returns True on success."""
        if user.id == self.acting_user_id:
            self.notifier.notify(Notification.error("Error", "Cannot delete your own account"))
            return False

        try:
            await self.admin_api.delete_user(user.id)
        except AdminAPIError as e:
            if e.is_conflict:
                agencies = conflict_agencies(e)
                if agencies:
                    names = ", ".join(a.name for a in agencies)
                    logger.warning(f"⚠️ User {user.id} owns claimed agencies: {names}")
                    self.notifier.notify(Notification.error(
                        "Cannot delete user",
                        f"User owns claimed agencies: {names}. Unclaim these agencies first.",
                    ))
                    return False
            logger.error(f"❌ Failed to delete user {user.id}: {e.message}")
            if e.code == "NETWORK_ERROR":
                description = "An unexpected error occurred"
            else:
                description = e.message or "Failed to delete user"
            self.notifier.notify(Notification.error("Error", description))
            return False
        except Exception as e:
            logger.error(f"❌ Unexpected error deleting user {user.id}: {e}")
            self.notifier.notify(Notification.error("Error", "An unexpected error occurred"))
            return False

        logger.info(f"🗑️ Deleted user {user.id}")
        self.users.pop(user.id, None)
        self._history.pop(user.id, None)
        self.notifier.notify(Notification.success(
            "User deleted",
            f"{user.display_name} has been deleted successfully.",
        ))
        return True

    async def change_role(
        self,
        user_id: str,
        new_role: UserRole,
        notes: Optional[str] = None,
    ) -> bool:
        """Change a user's role with an optimistic update.

        The local role is updated first and restored if the store rejects
        the change.
        """
        if user_id == self.acting_user_id:
            self.notifier.notify(Notification.error("Error", "You cannot change your own role."))
            return False

        user = self.users.get(user_id)
        if user is None:
            logger.warning(f"⚠️ Role change requested for unknown user {user_id}")
            return False

        new_role = UserRole(new_role)
        old_role = user.role
        self.users[user_id] = user.model_copy(update={"role": new_role})

        try:
            await self.role_store.change_user_role(user_id, new_role, notes or None)
        except RoleStoreError as e:
            self.users[user_id] = self.users[user_id].model_copy(update={"role": old_role})
            logger.error(f"❌ Role change for {user_id} failed: {e.message}")
            self.notifier.notify(Notification.error(
                "Error",
                e.message or "Failed to update role. Please try again.",
            ))
            return False
        except Exception as e:
            self.users[user_id] = self.users[user_id].model_copy(update={"role": old_role})
            logger.error(f"❌ Unexpected error changing role of {user_id}: {e}")
            self.notifier.notify(Notification.error("Error", "An unexpected error occurred"))
            return False

        self._history.pop(user_id, None)
        logger.info(f"🔑 Role of {user_id} changed from {old_role.value} to {new_role.value}")
        self.notifier.notify(Notification(
            title="Success",
            description=f"Role updated from {old_role.display_name} to {new_role.display_name}.",
        ))
        return True

    async def role_history(self, user_id: str) -> List[RoleChangeAudit]:
        """Get a user's role changes, newest first.

        Raises:
            RoleStoreError: If the history cannot be loaded
        """
        if user_id in self._history:
            return self._history[user_id]

        entries = await self.role_store.fetch_audit_log(user_id)
        entries = sorted(entries, key=lambda e: e.changed_at, reverse=True)
        self._history[user_id] = entries
        return entries
