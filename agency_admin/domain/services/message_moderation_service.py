"""Read-only moderation view over all platform conversations."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Dict, List, Optional, TypeVar

from ..models.conversation import (
    DELETED_MESSAGE_PREVIEW,
    HIGH_VOLUME_THRESHOLD,
    PREVIEW_LENGTH,
    AgencyContext,
    ConversationFilter,
    ConversationRecord,
    ConversationSummary,
    FilterCounts,
    MessageRecord,
    ModerationView,
)
from ..models.notification import Notification
from ..ports.conversation_store import ConversationDataAccess, ConversationStoreError
from ..ports.notifier import Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONVERSATION_LIMIT = 100
LOAD_ERROR = "Failed to load conversations. Please try again."


def summarize_conversations(
    conversations: List[ConversationRecord],
    active_messages: List[MessageRecord],
    latest_messages: List[MessageRecord],
    agencies: List[AgencyContext],
    now: datetime,
) -> List[ConversationSummary]:
    """Join conversations with their message stats, last message and agency.

    ``latest_messages`` must be ordered newest first; the first message seen
    per conversation is its preview.
    """
    one_day_ago = now - timedelta(hours=24)

    totals: Dict[str, int] = {}
    recent: Dict[str, int] = {}
    for message in active_messages:
        cid = message.conversation_id
        totals[cid] = totals.get(cid, 0) + 1
        if message.created_at >= one_day_ago:
            recent[cid] = recent.get(cid, 0) + 1

    last: Dict[str, MessageRecord] = {}
    for message in latest_messages:
        last.setdefault(message.conversation_id, message)

    agency_by_id = {agency.id: agency for agency in agencies}

    summaries = []
    for conversation in conversations:
        message = last.get(conversation.id)
        if message is None:
            preview = ""
        elif message.deleted_at is not None:
            preview = DELETED_MESSAGE_PREVIEW
        else:
            preview = (message.content or "")[:PREVIEW_LENGTH]

        agency = None
        if conversation.context_type == "agency_inquiry" and conversation.context_id:
            agency = agency_by_id.get(conversation.context_id)

        recent_count = recent.get(conversation.id, 0)
        summaries.append(ConversationSummary(
            id=conversation.id,
            context_type=conversation.context_type,
            context_agency=agency,
            participants=conversation.participants,
            total_messages=totals.get(conversation.id, 0),
            recent_messages_24h=recent_count,
            last_message_preview=preview,
            last_message_at=conversation.last_message_at,
            created_at=conversation.created_at,
            is_high_volume=recent_count >= HIGH_VOLUME_THRESHOLD,
        ))
    return summaries


def filter_conversations(
    summaries: List[ConversationSummary],
    conversation_filter: ConversationFilter = ConversationFilter.ALL,
    search: str = "",
) -> List[ConversationSummary]:
    """Apply the tab filter, then match participant names and emails."""
    if conversation_filter == ConversationFilter.HIGH_VOLUME:
        result = [s for s in summaries if s.is_high_volume]
    elif conversation_filter == ConversationFilter.FLAGGED:
        # No flagging source exists yet
        result = []
    else:
        result = list(summaries)

    needle = search.strip().lower()
    if needle:
        result = [
            s for s in result
            if any(needle in p.full_name.lower() or needle in p.email.lower() for p in s.participants)
        ]
    return result


def empty_message(conversation_filter: ConversationFilter, search: str) -> str:
    if search.strip():
        return "Try adjusting your search query"
    if conversation_filter == ConversationFilter.HIGH_VOLUME:
        return "No high-volume conversations at this time"
    return "No conversations to display"


class MessageModerationService:
    """Builds the admin moderation table of platform conversations."""

    def __init__(self, store: ConversationDataAccess, notifier: Notifier):
        self.store = store
        self.notifier = notifier

    async def load(
        self,
        conversation_filter: ConversationFilter = ConversationFilter.ALL,
        search: str = "",
        now: Optional[datetime] = None,
    ) -> ModerationView:
        """Load the latest conversations and render the filtered table.

        Failing to load conversations yields a view with ``error`` set;
        missing message stats or agency names degrade to empty values.
        """
        conversation_filter = ConversationFilter(conversation_filter)
        now = now or datetime.now(timezone.utc)

        try:
            conversations = await self.store.fetch_conversations(limit=CONVERSATION_LIMIT)
        except ConversationStoreError as e:
            logger.error(f"❌ Error fetching conversations: {e.message}")
            return self._failed(conversation_filter, search)
        except Exception as e:
            logger.error(f"❌ Unexpected error fetching conversations: {e}")
            return self._failed(conversation_filter, search)

        ids = [c.id for c in conversations]
        agency_ids = [
            c.context_id for c in conversations
            if c.context_type == "agency_inquiry" and c.context_id
        ]
        active = await self._optional(self.store.fetch_active_messages(ids), "message counts")
        latest = await self._optional(self.store.fetch_latest_messages(ids), "message previews")
        agencies = await self._optional(self.store.fetch_agencies(agency_ids), "agency context")

        summaries = summarize_conversations(conversations, active, latest, agencies, now)
        visible = filter_conversations(summaries, conversation_filter, search)

        return ModerationView(
            conversations=visible,
            counts=FilterCounts(
                all=len(summaries),
                high_volume=sum(1 for s in summaries if s.is_high_volume),
                flagged=0,
            ),
            filter=conversation_filter,
            search=search,
            empty_message=None if visible else empty_message(conversation_filter, search),
            footer=f"Showing {len(visible)} of {len(summaries)} conversations",
        )

    def _failed(self, conversation_filter: ConversationFilter, search: str) -> ModerationView:
        self.notifier.notify(Notification.error("Error", LOAD_ERROR))
        return ModerationView(filter=conversation_filter, search=search, error=LOAD_ERROR)

    @staticmethod
    async def _optional(call: Awaitable[List[T]], what: str) -> List[T]:
        try:
            return await call
        except ConversationStoreError as e:
            logger.warning(f"⚠️ Could not load {what}: {e.message}")
            return []
