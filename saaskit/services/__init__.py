"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- Orchestrate between the LLM client and the database
"""
from saaskit.services.chat_service import ChatService, PreparedChat, get_chat_service
from saaskit.services.conversation_service import ConversationService, get_conversation_service
from saaskit.services.membership_service import (
    MembershipService,
    MembershipState,
    get_membership_service,
)
from saaskit.services.persona_service import PersonaService, get_persona_service
from saaskit.services.user_service import UserService, get_user_service

__all__ = [
    "ChatService",
    "PreparedChat",
    "get_chat_service",
    "ConversationService",
    "get_conversation_service",
    "MembershipService",
    "MembershipState",
    "get_membership_service",
    "PersonaService",
    "get_persona_service",
    "UserService",
    "get_user_service",
]
