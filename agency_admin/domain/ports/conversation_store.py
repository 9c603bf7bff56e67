"""Data-access interface for conversations under moderation."""

from typing import List, Optional, Protocol

from ..models.conversation import AgencyContext, ConversationRecord, MessageRecord


class ConversationStoreError(Exception):
    """Error reported by the conversation data store."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class ConversationDataAccess(Protocol):
    """Protocol for reading platform conversations as an admin."""

    async def fetch_conversations(self, limit: int = 100) -> List[ConversationRecord]:
        """Get conversations with their participants, most recent activity first."""
        ...

    async def fetch_active_messages(self, conversation_ids: List[str]) -> List[MessageRecord]:
        """Get the messages of the given conversations that are not deleted."""
        ...

    async def fetch_latest_messages(self, conversation_ids: List[str]) -> List[MessageRecord]:
        """Get all messages of the given conversations, newest first."""
        ...

    async def fetch_agencies(self, agency_ids: List[str]) -> List[AgencyContext]:
        """Get the agencies that inquiry conversations refer to."""
        ...
