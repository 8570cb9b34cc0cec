"""Tests for the UI message stream encoder."""

from __future__ import annotations

from conftest import parse_events
from saaskit.api.ui_stream import DONE_FRAME, encode_ui_message_stream, sse_frame
from saaskit.core.exceptions import LLMError


def _encode(deltas, **kwargs):
    return parse_events("".join(encode_ui_message_stream(deltas, **kwargs)))


def _failing(*chunks, error):
    yield from chunks
    raise error


class TestSseFrame:
    def test_compact_json(self):
        assert sse_frame({"type": "finish"}) == 'data: {"type":"finish"}\n\n'

    def test_non_ascii_is_kept(self):
        assert "Grüße" in sse_frame({"type": "text-delta", "delta": "Grüße"})

    def test_done_frame(self):
        assert DONE_FRAME == "data: [DONE]\n\n"


class TestEncodeUiMessageStream:
    def test_full_sequence(self):
        events = _encode(["Hi", " there"], message_id="msg-1", message_metadata={"conversationId": "c1"})

        assert events[0] == {"type": "start", "messageId": "msg-1", "messageMetadata": {"conversationId": "c1"}}
        assert [e["type"] for e in events[1:-1]] == [
            "start-step", "text-start", "text-delta", "text-delta", "text-end", "finish-step", "finish",
        ]
        assert events[-1] == "[DONE]"

    def test_text_parts_share_one_id(self):
        events = _encode(["a", "b"])
        ids = {e["id"] for e in events[:-1] if e["type"].startswith("text-")}
        assert len(ids) == 1

    def test_empty_deltas_are_skipped(self):
        events = _encode(["", "a", ""])
        assert [e["delta"] for e in events[:-1] if e["type"] == "text-delta"] == ["a"]

    def test_no_text_means_no_text_part(self):
        events = _encode([])
        assert [e["type"] for e in events[:-1]] == ["start", "start-step", "finish-step", "finish"]

    def test_start_without_metadata(self):
        start = _encode([])[0]
        assert "messageMetadata" not in start
        assert start["messageId"].startswith("msg-")

    def test_application_error_text_is_forwarded(self):
        events = _encode(_failing("partial", error=LLMError("Model stream interrupted")))
        assert events[-2] == {"type": "error", "errorText": "Model stream interrupted"}
        assert events[-1] == "[DONE]"
        assert "finish" not in [e["type"] for e in events[:-1]]

    def test_unexpected_error_text_is_generic(self):
        events = _encode(_failing(error=KeyError("secret")))
        assert events[-2] == {"type": "error", "errorText": "An error occurred."}
