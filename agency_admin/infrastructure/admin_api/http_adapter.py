"""httpx implementation of the admin API port."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ...domain.models.agency import Agency, ComplianceAction, ComplianceItem, ComplianceType, LogoUpload
from ...domain.models.claim import ClaimsPage
from ...domain.models.import_preview import BulkImportResult
from ...domain.ports.admin_api import AdminAPIError, AdminAPIProvider
from ..config import AdminAPIConfig

logger = logging.getLogger(__name__)

# Set by the backend when a document is verified
VERIFICATION_STAMPS = {"verified_by", "verified_at"}


class HttpAdminAPIAdapter(AdminAPIProvider):
    """Talks to the ``/api/admin`` endpoints over HTTP.

    Failed responses carry ``{error: {code, message, details}}``; they are
    raised as ``AdminAPIError`` with the endpoint's fallback message when the
    body has none. Transport errors become ``NETWORK_ERROR``.
    """

    def __init__(
        self,
        config: Optional[AdminAPIConfig] = None,
        provider_name: str = "AdminAPI",
    ):
        self._config = config or AdminAPIConfig()
        self._name = provider_name
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Create the HTTP client."""
        try:
            if self._client is None:
                headers = {"Accept": "application/json"}
                if self._config.token:
                    headers["Authorization"] = f"Bearer {self._config.token}"
                self._client = httpx.AsyncClient(
                    base_url=self._config.base_url,
                    timeout=self._config.timeout,
                    headers=headers,
                )
            logger.info(f"🔌 Admin API client ready: {self._config.base_url}")
        except Exception as e:
            self._client = None
            raise ConnectionError(f"Failed to initialize admin API client: {e}")

    async def _request(
        self,
        method: str,
        path: str,
        fallback_message: str,
        **kwargs: Any,
    ) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("Provider not initialized")

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {e}")
            raise AdminAPIError(str(e) or fallback_message, code="NETWORK_ERROR")

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.is_error:
            error = body.get("error") if isinstance(body, dict) else None
            error = error if isinstance(error, dict) else {}
            logger.warning(f"⚠️ {method} {path} returned {response.status_code}")
            raise AdminAPIError(
                error.get("message") or fallback_message,
                status_code=response.status_code,
                code=error.get("code") or "INTERNAL_ERROR",
                details=error.get("details") if isinstance(error.get("details"), dict) else None,
            )

        return body if isinstance(body, dict) else {"data": body}

    async def list_claims(
        self,
        page: int = 1,
        limit: int = 25,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> ClaimsPage:
        params: Dict[str, Any] = {"page": str(page), "limit": str(limit)}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        body = await self._request(
            "GET", "/api/admin/claims", "Failed to fetch claims", params=params
        )
        return ClaimsPage.model_validate(body)

    async def approve_claim(self, claim_id: str) -> None:
        await self._request(
            "POST", f"/api/admin/claims/{claim_id}/approve", "Failed to approve claim"
        )

    async def reject_claim(self, claim_id: str, rejection_reason: str) -> None:
        await self._request(
            "POST",
            f"/api/admin/claims/{claim_id}/reject",
            "Failed to reject claim",
            json={"rejection_reason": rejection_reason},
        )

    async def create_agency(self, payload: Dict[str, Any]) -> Agency:
        body = await self._request(
            "POST", "/api/admin/agencies", "Failed to save agency", json=payload
        )
        return Agency.model_validate(body.get("data") or {})

    async def update_agency(self, agency_id: str, payload: Dict[str, Any]) -> Agency:
        body = await self._request(
            "PATCH", f"/api/admin/agencies/{agency_id}", "Failed to save agency", json=payload
        )
        data = body.get("data") or {}
        data.setdefault("id", agency_id)
        data.setdefault("name", payload.get("name", ""))
        return Agency.model_validate(data)

    async def set_agency_status(self, agency_id: str, active: bool) -> Agency:
        body = await self._request(
            "POST",
            f"/api/admin/agencies/{agency_id}/status",
            "Failed to update agency status",
            json={"active": active},
        )
        data = body.get("agency") or {}
        data.setdefault("id", agency_id)
        data.setdefault("name", "")
        data.setdefault("is_active", active)
        return Agency.model_validate(data)

    async def upload_logo(self, agency_id: str, logo: LogoUpload) -> str:
        body = await self._request(
            "POST",
            f"/api/admin/agencies/{agency_id}/logo",
            "Failed to upload logo",
            files={"file": (logo.filename, logo.content, logo.content_type)},
        )
        return (body.get("data") or {}).get("logo_url", "")

    async def delete_logo(self, agency_id: str) -> None:
        await self._request(
            "DELETE", f"/api/admin/agencies/{agency_id}/logo", "Failed to remove logo"
        )

    async def get_compliance(self, agency_id: str) -> List[ComplianceItem]:
        body = await self._request(
            "GET",
            f"/api/admin/agencies/{agency_id}/compliance",
            "Unable to load compliance data.",
        )
        return [ComplianceItem.model_validate(item) for item in body.get("data") or []]

    async def update_compliance(
        self, agency_id: str, items: List[ComplianceItem]
    ) -> List[ComplianceItem]:
        body = await self._request(
            "PUT",
            f"/api/admin/agencies/{agency_id}/compliance",
            "Failed to save compliance data",
            json={"items": [
                item.model_dump(mode="json", by_alias=True, exclude=VERIFICATION_STAMPS) for item in items
            ]},
        )
        return [ComplianceItem.model_validate(item) for item in body.get("data") or []]

    async def verify_compliance(
        self,
        agency_id: str,
        compliance_type: ComplianceType,
        action: ComplianceAction,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> ComplianceItem:
        action = ComplianceAction(action)
        payload: Dict[str, Any] = {
            "complianceType": ComplianceType(compliance_type).value,
            "action": action.value,
        }
        if reason:
            payload["reason"] = reason
        if notes:
            payload["notes"] = notes
        body = await self._request(
            "POST",
            f"/api/admin/agencies/{agency_id}/compliance/verify",
            f"Failed to {action.value} compliance document",
            json=payload,
        )
        # The endpoint answers with the raw agency_compliance row
        row = dict(body.get("data") or {})
        row.setdefault("type", row.pop("compliance_type", payload["complianceType"]))
        return ComplianceItem.model_validate(row)

    async def bulk_import(self, rows: List[Dict[str, Any]]) -> BulkImportResult:
        body = await self._request(
            "POST",
            "/api/admin/agencies/bulk-import",
            "Failed to import agencies",
            json={"rows": rows},
        )
        return BulkImportResult.model_validate(body)

    async def delete_user(self, user_id: str) -> None:
        await self._request(
            "DELETE", f"/api/admin/users/{user_id}", "Failed to delete user"
        )

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def provider_name(self) -> str:
        return self._name

    @property
    def is_available(self) -> bool:
        return self._client is not None
