"""
Chat Service - business logic of the persona chat endpoint.

This service orchestrates the chat flow:
1. Resolves the persona (and checks membership for members-only personas)
2. Creates a new conversation or loads the user's existing one
3. Stores the user's message before anything is streamed
4. Streams the answer from the hosted model
5. Stores the assistant's answer and updates the conversation statistics

The route stays thin: it authenticates, validates the body and turns the
text stream into the UI message stream.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from saaskit.core.exceptions import MembershipRequiredError, RequestValidationFailed
from saaskit.core.logging_config import get_logger
from saaskit.database.models import MessageRole
from saaskit.llm.client import CompletionStream, LLMClient, get_llm_client
from saaskit.llm.messages import to_model_messages
from saaskit.models.chat import ChatRequest
from saaskit.services.conversation_service import ConversationService, get_conversation_service
from saaskit.services.membership_service import MembershipService, get_membership_service
from saaskit.services.persona_service import PersonaService, get_persona_service

logger = get_logger(__name__)


@dataclass
class PreparedChat:
    """Everything needed to stream one answer; the user message is already stored."""
    user_id: str
    conversation_id: str
    persona_name: str
    system_prompt: str
    history: List[Dict[str, str]] = field(default_factory=list)
    created_conversation: bool = False


class ChatService:
    """
    Service for streamed persona chat with persisted history.

    Example:
        >>> service = ChatService()
        >>> prepared = service.prepare("user_1", request)
        >>> for delta in service.stream_reply(prepared):
        ...     print(delta, end="")
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        conversations: Optional[ConversationService] = None,
        personas: Optional[PersonaService] = None,
        memberships: Optional[MembershipService] = None,
    ):
        self.llm_client = llm_client or get_llm_client()
        self.conversations = conversations or get_conversation_service()
        self.personas = personas or get_persona_service()
        self.memberships = memberships or get_membership_service()

    @property
    def chat_model(self) -> str:
        return self.llm_client.default_model

    def prepare(self, user_id: str, request: ChatRequest) -> PreparedChat:
        """
        Run every step that must happen before the stream starts.

        Raises:
            PersonaNotFoundError: unknown persona
            MembershipRequiredError: members-only persona without membership
            ConversationNotFoundError: ``conversationId`` not owned by the user
            RequestValidationFailed: no message carries any text
        """
        history = to_model_messages(request.messages)
        if not history:
            raise RequestValidationFailed(
                field_errors={"messages": ["At least one message with text is required"]}
            )

        persona = self.personas.get_by_name(request.persona)
        logger.debug(f"Found persona template: {persona.id}")

        if persona.requires_membership and not self.memberships.has_active_membership(user_id):
            logger.info(f"User {user_id} lacks membership for persona {persona.name!r}")
            raise MembershipRequiredError()

        created = False
        if request.conversation_id:
            conversation = self.conversations.get_conversation(user_id, request.conversation_id)
        else:
            conversation = self.conversations.create_conversation(
                user_id=user_id,
                title=f"Chat with {request.persona}",
                model=self.chat_model,
            )
            self.personas.record_use(persona.id)
            created = True

        self.conversations.add_message(
            conversation.id, MessageRole.USER, request.last_user_text()
        )

        logger.info(
            f"Prepared chat: user={user_id} conversation={conversation.id} "
            f"persona={persona.name!r} history={len(history)} new={created}"
        )

        return PreparedChat(
            user_id=user_id,
            conversation_id=conversation.id,
            persona_name=persona.name,
            system_prompt=persona.prompt,
            history=history,
            created_conversation=created,
        )

    def stream_reply(self, prepared: PreparedChat) -> Iterator[str]:
        """
        Yield the model's answer chunk by chunk.

        The assistant message is stored only after the model finished. An
        interrupted stream (provider failure or client disconnect) leaves
        no assistant row behind.
        """
        stream: CompletionStream = self.llm_client.stream_chat(
            system_prompt=prepared.system_prompt,
            history=prepared.history,
        )
        for delta in stream:
            yield delta

        self.conversations.record_assistant_reply(
            conversation_id=prepared.conversation_id,
            content=stream.text,
            tokens=stream.total_tokens,
            model=stream.model or self.chat_model,
            latency=stream.latency_ms,
        )


_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get or create the chat service instance."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
