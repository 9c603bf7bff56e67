"""Tests for the HTTP admin API adapter."""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from agency_admin.domain.models.agency import ComplianceAction, ComplianceItem, ComplianceType, LogoUpload
from agency_admin.domain.ports.admin_api import AdminAPIError
from agency_admin.infrastructure.admin_api.http_adapter import HttpAdminAPIAdapter
from agency_admin.infrastructure.config import AdminAPIConfig

BASE_URL = "http://admin.test"


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, json_data=None, content: bytes = b""):
        self.status_code = status_code
        self.json_data = json_data
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.json_data is not None:
            return httpx.Response(self.status_code, json=self.json_data)
        return httpx.Response(self.status_code, content=self.content)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_adapter(handler) -> HttpAdminAPIAdapter:
    adapter = HttpAdminAPIAdapter(config=AdminAPIConfig(base_url=BASE_URL, token="secret"))
    adapter._client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return adapter


def page_body(claim, **pagination):
    body = {
        "data": [claim],
        "pagination": {"total": 1, "limit": 25, "offset": 0, "hasMore": False, "page": 1, "totalPages": 1},
    }
    body["pagination"].update(pagination)
    return body


class TestInitialization:
    @pytest.mark.asyncio
    async def test_initialize_sets_bearer_token(self):
        mock_client = MagicMock()
        adapter = HttpAdminAPIAdapter(config=AdminAPIConfig(base_url=BASE_URL, token="secret", timeout=5))

        with patch("httpx.AsyncClient", return_value=mock_client) as client_cls:
            await adapter.initialize()

        kwargs = client_cls.call_args.kwargs
        assert kwargs["base_url"] == BASE_URL
        assert kwargs["timeout"] == 5
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert adapter.is_available

    @pytest.mark.asyncio
    async def test_initialize_without_token(self):
        adapter = HttpAdminAPIAdapter(config=AdminAPIConfig(base_url=BASE_URL))

        with patch("httpx.AsyncClient", return_value=MagicMock()) as client_cls:
            await adapter.initialize()

        assert "Authorization" not in client_cls.call_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_initialize_failure(self):
        adapter = HttpAdminAPIAdapter()

        with patch("httpx.AsyncClient", side_effect=Exception("bad config")):
            with pytest.raises(ConnectionError, match="Failed to initialize admin API client"):
                await adapter.initialize()

        assert not adapter.is_available

    @pytest.mark.asyncio
    async def test_request_before_initialize(self):
        with pytest.raises(RuntimeError, match="Provider not initialized"):
            await HttpAdminAPIAdapter().approve_claim("claim-1")

    def test_provider_name(self):
        assert HttpAdminAPIAdapter().provider_name == "AdminAPI"


class TestClaims:
    @pytest.mark.asyncio
    async def test_list_claims_sends_only_set_filters(self, claim_payload):
        handler = RecordingHandler(json_data=page_body(claim_payload))
        adapter = make_adapter(handler)

        page = await adapter.list_claims(page=1, limit=25)

        params = dict(handler.last.url.params)
        assert handler.last.url.path == "/api/admin/claims"
        assert params == {"page": "1", "limit": "25"}
        assert page.data[0].agency.name == "Elite Staffing"
        assert page.pagination.total_pages == 1

    @pytest.mark.asyncio
    async def test_list_claims_with_filters(self, claim_payload):
        handler = RecordingHandler(json_data=page_body(claim_payload, page=2, offset=25, total=60, hasMore=True, totalPages=3))
        adapter = make_adapter(handler)

        page = await adapter.list_claims(page=2, limit=25, status="pending", search="elite")

        params = dict(handler.last.url.params)
        assert params == {"page": "2", "limit": "25", "status": "pending", "search": "elite"}
        assert page.pagination.has_more

    @pytest.mark.asyncio
    async def test_inconsistent_row_does_not_fail_page(self, claim_payload):
        stale = dict(claim_payload, id="claim-stale", rejection_reason="Left over from an earlier review")
        body = page_body(claim_payload, total=2)
        body["data"].append(stale)
        adapter = make_adapter(RecordingHandler(json_data=body))

        page = await adapter.list_claims()

        assert [claim.id for claim in page.data] == ["claim-123"]
        assert page.pagination.total == 2

    @pytest.mark.asyncio
    async def test_approve_posts_without_body(self):
        handler = RecordingHandler(json_data={"data": {"id": "claim-1", "status": "approved"}})
        adapter = make_adapter(handler)

        await adapter.approve_claim("claim-1")

        assert handler.last.method == "POST"
        assert handler.last.url.path == "/api/admin/claims/claim-1/approve"
        assert handler.last.content == b""

    @pytest.mark.asyncio
    async def test_reject_sends_reason(self):
        handler = RecordingHandler(json_data={"data": {"id": "claim-1", "status": "rejected"}})
        adapter = make_adapter(handler)

        await adapter.reject_claim("claim-1", "Could not verify the requester")

        assert handler.last.url.path == "/api/admin/claims/claim-1/reject"
        assert json.loads(handler.last.content) == {"rejection_reason": "Could not verify the requester"}


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_envelope(self):
        handler = RecordingHandler(409, json_data={"error": {
            "code": "CONFLICT",
            "message": "User owns claimed agencies",
            "details": {"claimed_agencies": [{"id": "a1", "name": "Acme"}]},
        }})
        adapter = make_adapter(handler)

        with pytest.raises(AdminAPIError) as exc_info:
            await adapter.delete_user("user-1")

        error = exc_info.value
        assert error.status_code == 409
        assert error.is_conflict
        assert error.code == "CONFLICT"
        assert error.message == "User owns claimed agencies"
        assert error.details["claimed_agencies"][0]["name"] == "Acme"

    @pytest.mark.asyncio
    async def test_error_without_body_uses_fallback(self):
        adapter = make_adapter(RecordingHandler(500, content=b"<html>oops</html>"))

        with pytest.raises(AdminAPIError) as exc_info:
            await adapter.list_claims()

        assert exc_info.value.message == "Failed to fetch claims"
        assert exc_info.value.code == "INTERNAL_ERROR"
        assert exc_info.value.details == {}

    @pytest.mark.asyncio
    async def test_transport_error_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        adapter = make_adapter(handler)

        with pytest.raises(AdminAPIError) as exc_info:
            await adapter.approve_claim("claim-1")

        assert exc_info.value.code == "NETWORK_ERROR"
        assert exc_info.value.status_code == 0
        assert exc_info.value.message == "Connection refused"


class TestAgencies:
    @pytest.mark.asyncio
    async def test_create_agency(self):
        handler = RecordingHandler(201, json_data={"data": {"id": "agency-1", "name": "Acme"}})
        adapter = make_adapter(handler)

        agency = await adapter.create_agency({"name": "Acme", "trade_ids": ["t1"]})

        assert handler.last.method == "POST"
        assert json.loads(handler.last.content)["trade_ids"] == ["t1"]
        assert agency.id == "agency-1"

    @pytest.mark.asyncio
    async def test_update_agency_patches(self):
        handler = RecordingHandler(json_data={"data": {"verified": True}})
        adapter = make_adapter(handler)

        agency = await adapter.update_agency("agency-1", {"name": "Acme"})

        assert handler.last.method == "PATCH"
        assert handler.last.url.path == "/api/admin/agencies/agency-1"
        assert (agency.id, agency.name, agency.verified) == ("agency-1", "Acme", True)

    @pytest.mark.asyncio
    async def test_create_agency_with_numeric_founded_year(self):
        handler = RecordingHandler(201, json_data={
            "data": {"id": "a1", "name": "Elite Staffing", "slug": "elite-staffing", "founded_year": 1995},
        })
        adapter = make_adapter(handler)

        agency = await adapter.create_agency({"name": "Elite Staffing", "founded_year": "1995"})

        assert agency.founded_year == 1995

    @pytest.mark.asyncio
    async def test_blank_founded_year_is_none(self):
        adapter = make_adapter(RecordingHandler(json_data={"data": {"founded_year": ""}}))

        agency = await adapter.update_agency("agency-1", {"name": "Acme"})

        assert agency.founded_year is None

    @pytest.mark.asyncio
    async def test_set_agency_status(self):
        handler = RecordingHandler(json_data={
            "agency": {"id": "agency-1", "name": "Acme", "is_active": False},
            "message": "Agency deactivated successfully",
        })
        adapter = make_adapter(handler)

        agency = await adapter.set_agency_status("agency-1", False)

        assert handler.last.method == "POST"
        assert handler.last.url.path == "/api/admin/agencies/agency-1/status"
        assert json.loads(handler.last.content) == {"active": False}
        assert agency.is_active is False

    @pytest.mark.asyncio
    async def test_set_agency_status_not_found(self):
        adapter = make_adapter(RecordingHandler(404, json_data={
            "error": {"code": "NOT_FOUND", "message": "Agency not found"},
        }))

        with pytest.raises(AdminAPIError) as exc_info:
            await adapter.set_agency_status("missing", True)

        assert (exc_info.value.status_code, exc_info.value.message) == (404, "Agency not found")

    @pytest.mark.asyncio
    async def test_upload_logo_is_multipart(self):
        handler = RecordingHandler(json_data={"data": {"logo_url": "https://cdn.test/acme.png"}})
        adapter = make_adapter(handler)

        url = await adapter.upload_logo("agency-1", LogoUpload(filename="acme.png", content=b"\x89PNG"))

        assert handler.last.headers["content-type"].startswith("multipart/form-data")
        assert url == "https://cdn.test/acme.png"

    @pytest.mark.asyncio
    async def test_delete_logo(self):
        handler = RecordingHandler(json_data={"success": True})
        adapter = make_adapter(handler)

        await adapter.delete_logo("agency-1")

        assert handler.last.method == "DELETE"
        assert handler.last.url.path == "/api/admin/agencies/agency-1/logo"

    @pytest.mark.asyncio
    async def test_update_compliance_uses_camel_case(self):
        item = {"type": "bonding", "isActive": True, "expirationDate": "2025-06-30",
                "isVerified": False, "notes": None, "documentUrl": None}
        handler = RecordingHandler(json_data={"data": [item]})
        adapter = make_adapter(handler)

        saved = await adapter.update_compliance(
            "agency-1", [ComplianceItem(type=ComplianceType.BONDING, is_active=True, expiration_date="2025-06-30")]
        )

        assert json.loads(handler.last.content) == {"items": [item]}
        assert saved[0].expiration_date.isoformat() == "2025-06-30"

    @pytest.mark.asyncio
    async def test_verify_compliance_reads_database_row(self):
        handler = RecordingHandler(json_data={
            "data": {
                "id": "c1",
                "agency_id": "agency-1",
                "compliance_type": "osha_certified",
                "is_active": True,
                "is_verified": True,
                "verified_by": "admin-1",
                "verified_at": "2024-02-01T12:00:00Z",
                "document_url": "https://storage.test/osha.pdf",
                "notes": "Checked",
            },
            "message": "Compliance document verified successfully",
        })
        adapter = make_adapter(handler)

        item = await adapter.verify_compliance(
            "agency-1", ComplianceType.OSHA_CERTIFIED, ComplianceAction.VERIFY, notes="Checked"
        )

        assert handler.last.url.path == "/api/admin/agencies/agency-1/compliance/verify"
        assert json.loads(handler.last.content) == {
            "complianceType": "osha_certified", "action": "verify", "notes": "Checked",
        }
        assert (item.type, item.is_verified, item.verified_by) == (ComplianceType.OSHA_CERTIFIED, True, "admin-1")

    @pytest.mark.asyncio
    async def test_reject_compliance_error_fallback(self):
        handler = RecordingHandler(500)
        adapter = make_adapter(handler)

        with pytest.raises(AdminAPIError, match="Failed to reject compliance document"):
            await adapter.verify_compliance("agency-1", "bonding", "reject", reason="Document has expired")

        assert json.loads(handler.last.content)["reason"] == "Document has expired"

    @pytest.mark.asyncio
    async def test_bulk_import(self):
        handler = RecordingHandler(json_data={
            "results": [{"rowNumber": 2, "status": "created", "agencyId": "a1", "agencyName": "Acme"}],
            "summary": {"total": 1, "created": 1, "skipped": 0, "failed": 0},
        })
        adapter = make_adapter(handler)

        result = await adapter.bulk_import([{"name": "Acme", "_rowNumber": 2}])

        assert handler.last.url.path == "/api/admin/agencies/bulk-import"
        assert json.loads(handler.last.content) == {"rows": [{"name": "Acme", "_rowNumber": 2}]}
        assert result.results[0].agency_id == "a1"


@pytest.mark.asyncio
async def test_shutdown_closes_client():
    adapter = make_adapter(RecordingHandler(json_data={}))

    await adapter.shutdown()

    assert not adapter.is_available
