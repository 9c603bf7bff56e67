"""Conversation moderation endpoints."""

from typing import List

from fastapi import APIRouter, Depends, Query

from ...domain.models.conversation import ConversationFilter, ModerationView
from ...domain.models.notification import Notification
from ...domain.services.message_moderation_service import MessageModerationService
from ...infrastructure.dependencies import get_message_moderation_service, get_notifier
from ...infrastructure.notifications import CollectingNotifier

router = APIRouter(prefix="/console/messages", tags=["messages"])


class ModerationResponse(ModerationView):
    notifications: List[Notification] = []


@router.get("", response_model=ModerationResponse)
async def list_conversations(
    filter: ConversationFilter = Query(ConversationFilter.ALL, description="Moderation tab"),
    search: str = Query("", description="Participant name or email"),
    service: MessageModerationService = Depends(get_message_moderation_service),
    notifier: CollectingNotifier = Depends(get_notifier),
) -> ModerationResponse:
    """List platform conversations for moderation."""
    view = await service.load(filter, search)
    return ModerationResponse(**view.model_dump(), notifications=notifier.notifications)
