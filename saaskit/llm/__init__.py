"""
LLM module - Language model integration.

- client.py   : streamed completions from Gemini with Groq fallback
- messages.py : UI message -> model history conversion
"""
from saaskit.core.exceptions import LLMError
from saaskit.llm.client import CompletionStream, LLMClient, get_llm_client
from saaskit.llm.messages import to_model_messages

__all__ = [
    "CompletionStream",
    "LLMClient",
    "LLMError",
    "get_llm_client",
    "to_model_messages",
]
