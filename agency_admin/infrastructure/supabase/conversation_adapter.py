"""Supabase PostgREST implementation of the conversation data-access port."""

import logging
from typing import Any, Dict, List

from ...domain.models.conversation import (
    AgencyContext,
    ConversationRecord,
    MessageRecord,
    Participant,
)
from ...domain.ports.conversation_store import ConversationStoreError
from .rest_adapter import SupabaseRestAdapter

logger = logging.getLogger(__name__)

CONVERSATION_SELECT = (
    "id,context_type,context_id,last_message_at,created_at,"
    "conversation_participants!inner(user_id,profiles:user_id(id,full_name,email,role))"
)


def _in_filter(ids: List[str]) -> str:
    return f"in.({','.join(ids)})"


def _participants(row: Dict[str, Any]) -> List[Participant]:
    participants = []
    for entry in row.get("conversation_participants") or []:
        profile = entry.get("profiles") or {}
        participants.append(Participant(
            id=profile.get("id") or entry.get("user_id") or "",
            full_name=profile.get("full_name") or "Unknown",
            email=profile.get("email") or "",
            role=profile.get("role") or "user",
        ))
    return participants


class SupabaseConversationStore(SupabaseRestAdapter):
    """Reads conversations, messages and agency names for moderation.

    Relies on the admin row-level-security policies that expose every
    conversation to admins.
    """

    error_class = ConversationStoreError

    async def fetch_conversations(self, limit: int = 100) -> List[ConversationRecord]:
        rows = await self._send(
            "GET",
            "/conversations",
            "Failed to load conversations. Please try again.",
            params={
                "select": CONVERSATION_SELECT,
                "order": "last_message_at.desc",
                "limit": str(limit),
            },
        )
        conversations = []
        for row in rows or []:
            conversations.append(ConversationRecord(
                id=row["id"],
                context_type=row.get("context_type") or "general",
                context_id=row.get("context_id"),
                last_message_at=row.get("last_message_at"),
                created_at=row["created_at"],
                participants=_participants(row),
            ))
        logger.info(f"💬 Loaded {len(conversations)} conversations")
        return conversations

    async def fetch_active_messages(self, conversation_ids: List[str]) -> List[MessageRecord]:
        if not conversation_ids:
            return []
        rows = await self._send(
            "GET",
            "/messages",
            "Failed to load message counts",
            params={
                "select": "conversation_id,created_at",
                "conversation_id": _in_filter(conversation_ids),
                "deleted_at": "is.null",
            },
        )
        return [MessageRecord.model_validate(row) for row in rows or []]

    async def fetch_latest_messages(self, conversation_ids: List[str]) -> List[MessageRecord]:
        if not conversation_ids:
            return []
        rows = await self._send(
            "GET",
            "/messages",
            "Failed to load message previews",
            params={
                "select": "conversation_id,content,created_at,deleted_at",
                "conversation_id": _in_filter(conversation_ids),
                "order": "created_at.desc",
            },
        )
        return [MessageRecord.model_validate(row) for row in rows or []]

    async def fetch_agencies(self, agency_ids: List[str]) -> List[AgencyContext]:
        if not agency_ids:
            return []
        rows = await self._send(
            "GET",
            "/agencies",
            "Failed to load agencies",
            params={"select": "id,name,slug", "id": _in_filter(agency_ids)},
        )
        return [AgencyContext.model_validate(row) for row in rows or []]
