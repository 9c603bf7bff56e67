"""Tests for the claim event bus."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from agency_admin.domain.models.claim_event import ClaimEvent, ClaimEventType
from agency_admin.domain.services.claim_events import ClaimEventBus


def approved(claim_id: str = "claim-1") -> ClaimEvent:
    return ClaimEvent(ClaimEventType.APPROVED, claim_id, "Acme Staffing")


@pytest.mark.asyncio
async def test_publish_reaches_sync_and_async_handlers(event_bus):
    sync_handler = MagicMock(return_value=None)
    async_handler = AsyncMock()
    event_bus.subscribe(ClaimEventType.APPROVED, sync_handler)
    event_bus.subscribe(ClaimEventType.APPROVED, async_handler)

    event = approved()
    await event_bus.publish(event)

    sync_handler.assert_called_once_with(event)
    async_handler.assert_awaited_once_with(event)


@pytest.mark.asyncio
async def test_handler_errors_do_not_reach_publisher(event_bus):
    failing = AsyncMock(side_effect=RuntimeError("boom"))
    healthy = AsyncMock()
    event_bus.subscribe_all(failing)
    event_bus.subscribe_all(healthy)

    await event_bus.publish(approved())

    healthy.assert_awaited_once()


@pytest.mark.asyncio
async def test_unsubscribe_all(event_bus):
    handler = AsyncMock()
    event_bus.subscribe_all(handler)
    event_bus.unsubscribe_all(handler)

    await event_bus.publish(approved())

    handler.assert_not_awaited()


def test_unsubscribe_unknown_handler_is_ignored(event_bus):
    event_bus.unsubscribe(ClaimEventType.REJECTED, MagicMock())

    assert event_bus.subscribers.get(ClaimEventType.REJECTED, []) == []


@pytest.mark.asyncio
async def test_history_filters_and_limit():
    bus = ClaimEventBus(max_history=2)
    await bus.publish(approved("claim-1"))
    await bus.publish(ClaimEvent(ClaimEventType.REJECTED, "claim-2", "Beta", rejection_reason="x" * 20))
    await bus.publish(approved("claim-3"))

    assert [e.claim_id for e in bus.get_events()] == ["claim-2", "claim-3"]
    assert [e.claim_id for e in bus.get_events(event_type=ClaimEventType.APPROVED)] == ["claim-3"]
    assert bus.get_events(claim_id="claim-2")[0].to_dict()["event_type"] == "claim.rejected"
