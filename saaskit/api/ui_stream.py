"""
UI message stream encoding.

The chat front-end consumes server-sent events where every event is a
JSON object ``data: {...}\\n\\n``. One assistant answer is framed as::

    start -> start-step -> text-start -> text-delta* -> text-end
          -> finish-step -> finish -> [DONE]

A failure while streaming replaces the remaining frames with a single
``error`` event followed by ``[DONE]``.
"""
import json
import uuid
from typing import Any, Dict, Iterable, Iterator, Optional

from saaskit.core.exceptions import SaasKitException
from saaskit.core.logging_config import get_logger

logger = get_logger(__name__)

MEDIA_TYPE = "text/event-stream"

UI_MESSAGE_STREAM_HEADERS = {
    "x-vercel-ai-ui-message-stream": "v1",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

DONE_FRAME = "data: [DONE]\n\n"

GENERIC_ERROR_TEXT = "An error occurred."


def sse_frame(event: Dict[str, Any]) -> str:
    return f"data: {json.dumps(event, ensure_ascii=False, separators=(',', ':'))}\n\n"


def encode_ui_message_stream(
    deltas: Iterable[str],
    message_metadata: Optional[Dict[str, Any]] = None,
    message_id: Optional[str] = None,
) -> Iterator[str]:
    """
    Frame a stream of text deltas as UI message stream events.

    Args:
        deltas: Text chunks of the assistant answer
        message_metadata: Attached to the ``start`` event
        message_id: Id of the assistant message; generated when omitted
    """
    message_id = message_id or f"msg-{uuid.uuid4().hex}"
    text_id = f"text-{uuid.uuid4().hex[:12]}"

    start: Dict[str, Any] = {"type": "start", "messageId": message_id}
    if message_metadata is not None:
        start["messageMetadata"] = message_metadata
    yield sse_frame(start)
    yield sse_frame({"type": "start-step"})

    text_open = False
    try:
        for delta in deltas:
            if not delta:
                continue
            if not text_open:
                yield sse_frame({"type": "text-start", "id": text_id})
                text_open = True
            yield sse_frame({"type": "text-delta", "id": text_id, "delta": delta})
    except Exception as e:
        logger.exception(f"Chat stream failed: {e}")
        error_text = e.message if isinstance(e, SaasKitException) else GENERIC_ERROR_TEXT
        yield sse_frame({"type": "error", "errorText": error_text})
        yield DONE_FRAME
        return

    if text_open:
        yield sse_frame({"type": "text-end", "id": text_id})
    yield sse_frame({"type": "finish-step"})
    yield sse_frame({"type": "finish"})
    yield DONE_FRAME
