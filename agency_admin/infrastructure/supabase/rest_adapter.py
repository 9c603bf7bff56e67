"""Supabase PostgREST implementation of the role data-access port."""

import logging
from typing import Any, Dict, List, Optional, Type

import httpx

from ...domain.models.user import RoleChangeAudit, UserRole
from ...domain.ports.role_store import RoleStoreError
from ..config import SupabaseConfig

logger = logging.getLogger(__name__)

AUDIT_SELECT = "*,admin_profile:profiles!admin_id(full_name,email)"


class SupabaseRestAdapter:
    """Shared PostgREST client; subclasses pick the error they raise."""

    error_class: Type[Exception] = RoleStoreError

    def __init__(self, config: Optional[SupabaseConfig] = None):
        self._config = config or SupabaseConfig()
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        try:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=f"{self._config.url.rstrip('/')}/rest/v1",
                    timeout=self._config.timeout,
                    headers={
                        "apikey": self._config.key,
                        "Authorization": f"Bearer {self._config.key}",
                        "Accept": "application/json",
                    },
                )
        except Exception as e:
            self._client = None
            raise ConnectionError(f"Failed to initialize Supabase client: {e}")

    async def _send(self, method: str, path: str, fallback_message: str, **kwargs: Any) -> Any:
        if not self._client:
            raise RuntimeError("Provider not initialized")
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ Supabase {method} {path} failed: {e}")
            raise self.error_class(str(e) or fallback_message, code="NETWORK_ERROR")

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if response.is_error:
            # PostgREST errors: {code, message, details, hint}
            message = body.get("message") if isinstance(body, dict) else None
            code = body.get("code") if isinstance(body, dict) else None
            raise self.error_class(message or fallback_message, code=code)
        return body

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def is_available(self) -> bool:
        return self._client is not None


class SupabaseRoleStore(SupabaseRestAdapter):
    """Reads the role audit trail and calls ``change_user_role`` via PostgREST."""

    async def fetch_audit_log(self, user_id: str) -> List[RoleChangeAudit]:
        rows = await self._send(
            "GET",
            "/role_change_audit",
            "Failed to load role history",
            params={
                "select": AUDIT_SELECT,
                "user_id": f"eq.{user_id}",
                "order": "changed_at.desc",
            },
        )
        return [RoleChangeAudit.model_validate(row) for row in rows or []]

    async def change_user_role(
        self,
        target_user_id: str,
        new_role: UserRole,
        admin_notes: Optional[str] = None,
    ) -> None:
        payload: Dict[str, Any] = {
            "target_user_id": target_user_id,
            "new_role": UserRole(new_role).value,
            "admin_notes": admin_notes,
        }
        await self._send(
            "POST",
            "/rpc/change_user_role",
            "Failed to update role. Please try again.",
            json=payload,
        )
