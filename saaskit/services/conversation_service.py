"""
Conversation Service - storage of conversations and messages.

Every read and write of the ``conversations`` and ``messages`` tables goes
through this service. Ownership is enforced here: a conversation that
belongs to another user behaves exactly like one that does not exist.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from saaskit.core.exceptions import ConversationNotFoundError, MessageNotFoundError
from saaskit.core.logging_config import get_logger
from saaskit.core.validators import sanitize_title
from saaskit.database.connection import DatabaseConnection, get_database
from saaskit.database.models import (
    Conversation,
    ConversationType,
    Message,
    MessageRole,
)

logger = get_logger(__name__)


class ConversationService:
    """
    CRUD over conversations and messages for one user at a time.

    Example:
        >>> service = ConversationService()
        >>> conv = service.create_conversation("user_1", "Chat with Marketing Specialist", "gemini-2.5-flash-lite")
        >>> service.add_message(conv.id, MessageRole.USER, "Hi")
    """

    def __init__(self, db: Optional[DatabaseConnection] = None):
        self._db = db

    @property
    def db(self) -> DatabaseConnection:
        return self._db or get_database()

    # ------------------------------------------------------------
    # Chat write path
    # ------------------------------------------------------------

    def create_conversation(
        self,
        user_id: str,
        title: str,
        model: str,
        conversation_type: ConversationType = ConversationType.CHAT,
    ) -> Conversation:
        with self.db.get_session() as session:
            conversation = Conversation(
                user_id=user_id,
                title=sanitize_title(title) or None,
                model=model,
                type=conversation_type.value,
            )
            session.add(conversation)
            session.flush()
            logger.info(f"Created conversation {conversation.id} for user={user_id}")
            return conversation

    def get_conversation(self, user_id: str, conversation_id: str) -> Conversation:
        """
        Load a conversation owned by ``user_id``.

        Raises:
            ConversationNotFoundError: missing or owned by someone else
        """
        with self.db.get_session() as session:
            return self._owned(session, user_id, conversation_id)

    def add_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        tokens: int = 0,
        model: Optional[str] = None,
        latency: Optional[int] = None,
    ) -> Message:
        with self.db.get_session() as session:
            message = Message(
                conversation_id=conversation_id,
                role=role.value,
                content=content or "",
                tokens=tokens,
                model=model,
                latency=latency,
            )
            session.add(message)
            session.flush()
            logger.debug(f"Saved {role.value} message to conversation {conversation_id}")
            return message

    def record_assistant_reply(
        self,
        conversation_id: str,
        content: str,
        tokens: int,
        model: Optional[str],
        latency: Optional[int],
    ) -> Message:
        """
        Persist a finished assistant answer and update conversation statistics.

        Both writes happen in one transaction. ``message_count`` grows by two
        (the user message and this reply) and ``total_tokens`` by the usage.
        """
        now = datetime.utcnow()
        with self.db.get_session() as session:
            message = Message(
                conversation_id=conversation_id,
                role=MessageRole.ASSISTANT.value,
                content=content,
                tokens=tokens,
                model=model,
                latency=latency,
            )
            session.add(message)

            session.query(Conversation).filter(Conversation.id == conversation_id).update(
                {
                    Conversation.message_count: Conversation.message_count + 2,
                    Conversation.total_tokens: Conversation.total_tokens + tokens,
                    Conversation.last_message_at: now,
                    Conversation.updated_at: now,
                },
                synchronize_session=False,
            )
            session.flush()

        logger.info(
            f"Recorded assistant reply: conversation={conversation_id} "
            f"tokens={tokens} latency={latency}ms"
        )
        return message

    # ------------------------------------------------------------
    # Dashboard read/write path
    # ------------------------------------------------------------

    def list_conversations(self, user_id: str, include_archived: bool = True) -> List[Conversation]:
        """Conversations of ``user_id``, newest first."""
        with self.db.get_session() as session:
            query = session.query(Conversation).filter(Conversation.user_id == user_id)
            if not include_archived:
                query = query.filter(Conversation.is_archived.is_(False))
            return query.order_by(Conversation.created_at.desc()).all()

    def list_messages(self, user_id: str, conversation_id: str) -> List[Message]:
        """Messages of an owned conversation, oldest first."""
        with self.db.get_session() as session:
            self._owned(session, user_id, conversation_id)
            return (
                session.query(Message)
                .filter(Message.conversation_id == conversation_id)
                .order_by(Message.created_at.asc())
                .all()
            )

    def rename_conversation(self, user_id: str, conversation_id: str, title: str) -> Conversation:
        with self.db.get_session() as session:
            conversation = self._owned(session, user_id, conversation_id)
            conversation.title = sanitize_title(title) or conversation.title
            conversation.updated_at = datetime.utcnow()
            session.flush()
            return conversation

    def set_archived(self, user_id: str, conversation_id: str, archived: bool) -> Conversation:
        with self.db.get_session() as session:
            conversation = self._owned(session, user_id, conversation_id)
            conversation.is_archived = archived
            conversation.updated_at = datetime.utcnow()
            session.flush()
            return conversation

    def delete_conversation(self, user_id: str, conversation_id: str) -> bool:
        """Delete an owned conversation; its messages go with it."""
        with self.db.get_session() as session:
            conversation = self._owned(session, user_id, conversation_id)
            session.delete(conversation)
        logger.info(f"Deleted conversation {conversation_id} for user={user_id}")
        return True

    def rate_message(
        self,
        user_id: str,
        message_id: str,
        rating: int,
        feedback: Optional[str] = None,
    ) -> Message:
        with self.db.get_session() as session:
            message = (
                session.query(Message)
                .join(Conversation, Message.conversation_id == Conversation.id)
                .filter(Message.id == message_id, Conversation.user_id == user_id)
                .first()
            )
            if message is None:
                raise MessageNotFoundError(message_id)
            message.rating = rating
            message.feedback = feedback
            session.flush()
            return message

    def _owned(self, session: Session, user_id: str, conversation_id: str) -> Conversation:
        conversation = (
            session.query(Conversation)
            .filter(Conversation.id == conversation_id, Conversation.user_id == user_id)
            .first()
        )
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation


_conversation_service: Optional[ConversationService] = None


def get_conversation_service() -> ConversationService:
    global _conversation_service
    if _conversation_service is None:
        _conversation_service = ConversationService()
    return _conversation_service
