"""
Chat RPC procedures - the dashboard's view of conversations and messages.

Procedures:
- GET  /rpc/chat.getConversations
- GET  /rpc/chat.getMessages?conversationId=...
- POST /rpc/chat.renameConversation
- POST /rpc/chat.archiveConversation
- POST /rpc/chat.deleteConversation
- POST /rpc/chat.rateMessage

All procedures require a signed-in user and only ever see that user's
conversations.
"""
from typing import List

from fastapi import APIRouter, Depends, Query

from saaskit.api.dependencies import get_current_user_id
from saaskit.core.logging_config import get_logger
from saaskit.models.chat import ErrorResponse
from saaskit.models.rpc import (
    ArchiveConversationInput,
    ConversationIdInput,
    ConversationOut,
    DeleteResult,
    MessageOut,
    RateMessageInput,
    RenameConversationInput,
)
from saaskit.services.conversation_service import ConversationService, get_conversation_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/rpc",
    tags=["RPC: chat"],
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        404: {"model": ErrorResponse, "description": "Conversation or message not found"},
    },
)


@router.get("/chat.getConversations", response_model=List[ConversationOut])
def get_conversations(
    include_archived: bool = Query(default=True, alias="includeArchived"),
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    """The user's conversations, newest first."""
    return service.list_conversations(user_id, include_archived=include_archived)


@router.get("/chat.getMessages", response_model=List[MessageOut])
def get_messages(
    conversation_id: str = Query(..., alias="conversationId", min_length=1),
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    """Messages of one conversation in the order they were written."""
    return service.list_messages(user_id, conversation_id)


@router.post("/chat.renameConversation", response_model=ConversationOut)
def rename_conversation(
    data: RenameConversationInput,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    return service.rename_conversation(user_id, data.conversation_id, data.title)


@router.post("/chat.archiveConversation", response_model=ConversationOut)
def archive_conversation(
    data: ArchiveConversationInput,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    return service.set_archived(user_id, data.conversation_id, data.archived)


@router.post("/chat.deleteConversation", response_model=DeleteResult)
def delete_conversation(
    data: ConversationIdInput,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    """Delete a conversation together with all of its messages."""
    deleted = service.delete_conversation(user_id, data.conversation_id)
    return DeleteResult(id=data.conversation_id, deleted=deleted)


@router.post("/chat.rateMessage", response_model=MessageOut)
def rate_message(
    data: RateMessageInput,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
):
    """Store a 1-5 star rating and optional feedback on a message."""
    return service.rate_message(user_id, data.message_id, data.rating, data.feedback)
