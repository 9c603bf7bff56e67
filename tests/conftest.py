"""Test configuration and common fixtures."""

from typing import Any, Callable, Dict, Optional
from unittest.mock import AsyncMock

import pytest

from agency_admin.domain.models.claim import ClaimRequest, ClaimsPage, Pagination
from agency_admin.domain.ports.admin_api import AdminAPIProvider
from agency_admin.domain.services.claim_events import ClaimEventBus
from agency_admin.infrastructure.notifications import CollectingNotifier


def claim_data(**overrides: Any) -> Dict[str, Any]:
    """Raw claim payload as returned by the admin API."""
    data = {
        "id": "claim-123",
        "agency_id": "agency-456",
        "user_id": "user-789",
        "status": "pending",
        "business_email": "john@elitestaffing.com",
        "phone_number": "+15551234567",
        "position_title": "HR Manager",
        "verification_method": "email",
        "email_domain_verified": True,
        "additional_notes": None,
        "rejection_reason": None,
        "reviewed_by": None,
        "reviewed_at": None,
        "created_at": "2024-01-15T10:30:00Z",
        "updated_at": "2024-01-15T10:30:00Z",
        "agency": {
            "id": "agency-456",
            "name": "Elite Staffing",
            "slug": "elite-staffing",
            "logo_url": None,
            "website": "https://www.elitestaffing.com",
        },
        "user": {"id": "user-789", "full_name": "John Doe", "email": "john@example.com"},
    }
    data.update(overrides)
    return data


@pytest.fixture
def claim_payload() -> Dict[str, Any]:
    return claim_data()


@pytest.fixture
def make_claim() -> Callable[..., ClaimRequest]:
    """Factory for claim requests."""
    def _make(**overrides: Any) -> ClaimRequest:
        return ClaimRequest.model_validate(claim_data(**overrides))
    return _make


@pytest.fixture
def make_page(make_claim) -> Callable[..., ClaimsPage]:
    """Factory for one page of claims."""
    def _make(
        claims: Optional[list] = None,
        total: Optional[int] = None,
        page: int = 1,
        limit: int = 25,
    ) -> ClaimsPage:
        claims = [make_claim()] if claims is None else claims
        total = len(claims) if total is None else total
        offset = (page - 1) * limit
        return ClaimsPage(
            data=claims,
            pagination=Pagination(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + limit < total,
                page=page,
                total_pages=-(-total // limit),
            ),
        )
    return _make


@pytest.fixture
def admin_api() -> AsyncMock:
    """Admin API port double."""
    return AsyncMock(spec=AdminAPIProvider)


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def event_bus() -> ClaimEventBus:
    return ClaimEventBus()

