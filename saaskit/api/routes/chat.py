"""
Chat Route - the streaming persona chat endpoint.

POST /api/chat takes the chat front-end's request (persona, optional
conversation id, UI message history) and answers with a UI message
stream. Errors before the stream starts are JSON ``{"error": ...}``
responses with 400, 401, 403, 404, 429 or 500.
"""
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from saaskit.api.dependencies import get_current_user_id
from saaskit.api.ui_stream import (
    MEDIA_TYPE,
    UI_MESSAGE_STREAM_HEADERS,
    encode_ui_message_stream,
)
from saaskit.core.exceptions import RateLimitExceeded
from saaskit.core.logging_config import get_logger
from saaskit.core.rate_limiter import get_rate_limiter
from saaskit.core.validators import parse_body
from saaskit.models.chat import ChatRequest, ErrorResponse
from saaskit.services.chat_service import ChatService, get_chat_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/chat",
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request body"},
        401: {"model": ErrorResponse, "description": "Not signed in"},
        403: {"model": ErrorResponse, "description": "Persona requires a membership"},
        404: {"model": ErrorResponse, "description": "Unknown persona or conversation"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)


@router.post("", summary="Chat with a persona")
async def chat(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """
    Stream an answer from the selected persona.

    A new conversation is created when ``conversationId`` is missing. The
    user's message is stored before streaming starts; the answer is stored
    once the model finished. The ``start`` event carries
    ``{conversationId, createdAt}`` so the client can continue the
    conversation.
    """
    # The body is parsed by hand so schema errors come back flattened
    chat_request = parse_body(await request.body(), ChatRequest)

    rate_limiter = get_rate_limiter()
    is_allowed, remaining = rate_limiter.is_allowed(user_id)
    if not is_allowed:
        raise RateLimitExceeded(retry_after=rate_limiter.retry_after(user_id))

    logger.info(
        f"Chat request: user={user_id} persona={chat_request.persona!r} "
        f"conversation={chat_request.conversation_id or 'new'} "
        f"messages={len(chat_request.messages)} trigger={chat_request.trigger}"
    )

    prepared = await run_in_threadpool(chat_service.prepare, user_id, chat_request)

    metadata = {
        "conversationId": prepared.conversation_id,
        "createdAt": int(time.time() * 1000),
    }
    headers = dict(UI_MESSAGE_STREAM_HEADERS)
    headers["X-RateLimit-Limit"] = str(rate_limiter.limit)
    headers["X-RateLimit-Remaining"] = str(remaining)

    return StreamingResponse(
        encode_ui_message_stream(chat_service.stream_reply(prepared), metadata),
        media_type=MEDIA_TYPE,
        headers=headers,
    )
