"""
Request and Response models for the chat endpoint.

The chat request mirrors what the chat front-end sends: the selected
persona, an optional conversation id and the full list of UI messages.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class UIMessage(BaseModel):
    """
    A chat message as the front-end renders it.

    ``parts`` is a list of typed parts; only ``{"type": "text", "text": ...}``
    parts carry content the service uses. Unknown part types and extra
    keys are kept untouched.
    """
    model_config = ConfigDict(extra="allow")

    id: str = ""
    role: Literal["user", "assistant", "system"]
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Optional[Any] = None

    def text(self) -> str:
        """Concatenated text of every text part."""
        return "".join(
            str(part.get("text", ""))
            for part in self.parts
            if part.get("type") == "text"
        )


class ChatRequest(BaseModel):
    """
    Request body of ``POST /api/chat``.

    Attributes:
        persona: Name of the prompt template to chat with.
        conversation_id: Existing conversation to continue; omitted/null starts a new one.
        id: Client-side chat id.
        messages: Full UI message history, last entry is the new user message.
        trigger: Why the client sent the request (e.g. ``submit-message``).
    """
    model_config = ConfigDict(populate_by_name=True)

    persona: str = Field(..., description="Persona (prompt template) name")
    conversation_id: Optional[str] = Field(
        default=None,
        alias="conversationId",
        description="Conversation to continue; null starts a new conversation",
    )
    id: str = Field(..., description="Client chat id")
    messages: List[UIMessage] = Field(..., description="UI message history")
    trigger: Optional[str] = Field(default=None, description="Client trigger")

    def last_user_text(self) -> str:
        """Text of the last message, or an empty string."""
        if not self.messages:
            return ""
        return self.messages[-1].text()


class HealthResponse(BaseModel):
    """Response model for the /health endpoints."""
    status: str = Field(default="healthy")
    version: str
    database: Optional[bool] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: Any
    code: Optional[str] = None
    details: Optional[str] = None
