"""Domain models for conversation moderation."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

HIGH_VOLUME_THRESHOLD = 10
PREVIEW_LENGTH = 100
DELETED_MESSAGE_PREVIEW = "(This message was deleted)"


class ConversationFilter(str, Enum):
    """Tabs of the moderation table."""

    ALL = "all"
    HIGH_VOLUME = "high_volume"
    FLAGGED = "flagged"


class Participant(BaseModel):
    """A user taking part in a conversation."""

    id: str
    full_name: str = "Unknown"
    email: str = ""
    role: str = "user"


class AgencyContext(BaseModel):
    """Agency an inquiry conversation is about."""

    id: str
    name: str
    slug: Optional[str] = None


class ConversationRecord(BaseModel):
    """A conversation row with its participants, as stored."""

    id: str
    context_type: str = "general"
    context_id: Optional[str] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime
    participants: List[Participant] = Field(default_factory=list)


class MessageRecord(BaseModel):
    """The parts of a message the moderation view needs."""

    conversation_id: str
    created_at: datetime
    content: Optional[str] = None
    deleted_at: Optional[datetime] = None


class ConversationSummary(BaseModel):
    """One row of the moderation table."""

    id: str
    context_type: str
    context_agency: Optional[AgencyContext] = None
    participants: List[Participant] = Field(default_factory=list)
    total_messages: int = 0
    recent_messages_24h: int = 0
    last_message_preview: str = ""
    last_message_at: Optional[datetime] = None
    created_at: datetime
    is_high_volume: bool = False


class FilterCounts(BaseModel):
    all: int = 0
    high_volume: int = 0
    flagged: int = 0


class ModerationView(BaseModel):
    """Everything the moderation screen renders."""

    conversations: List[ConversationSummary] = Field(default_factory=list)
    counts: FilterCounts = Field(default_factory=FilterCounts)
    filter: ConversationFilter = ConversationFilter.ALL
    search: str = ""
    empty_message: Optional[str] = None
    footer: str = ""
    error: Optional[str] = None
