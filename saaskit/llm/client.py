"""
LLM Client for streamed persona chat.

Completions are streamed from Google Gemini. When Gemini fails before
producing the first token and a Groq key is configured, the request is
retried against Groq. Once text has reached the caller a failure can no
longer be retried and surfaces as ``LLMError``.
"""
import time
from typing import Dict, Iterator, List, Optional, Tuple

import google.generativeai as genai
from groq import Groq

from saaskit.core.config import Settings, get_settings
from saaskit.core.exceptions import LLMError
from saaskit.core.logging_config import get_logger

logger = get_logger(__name__)

# (text delta, total tokens reported so far or None)
Chunk = Tuple[str, Optional[int]]

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class CompletionStream:
    """
    Iterable of text deltas for one completion.

    After the iteration finished, ``text``, ``total_tokens``, ``model``
    and ``latency_ms`` describe the completed answer.
    """

    def __init__(
        self,
        client: "LLMClient",
        system_prompt: str,
        history: List[Dict[str, str]],
        model: str,
    ):
        self._client = client
        self.system_prompt = system_prompt
        self.history = history
        self.requested_model = model

        self.model: Optional[str] = None
        self.provider: Optional[str] = None
        self.total_tokens = 0
        self.latency_ms: Optional[int] = None
        self.finished = False
        self._parts: List[str] = []

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def __iter__(self) -> Iterator[str]:
        started_at = time.monotonic()
        last_error: Optional[Exception] = None

        for provider, target_model in self._client.cascade(self.requested_model):
            started = False
            try:
                for delta, tokens in self._client.stream_provider(
                    provider, target_model, self.system_prompt, self.history
                ):
                    if tokens is not None:
                        self.total_tokens = tokens
                    if delta:
                        started = True
                        self._parts.append(delta)
                        yield delta
            except Exception as e:
                if started:
                    logger.error(f"Stream from {provider}/{target_model} broke mid-answer: {e}")
                    raise LLMError(f"Model stream interrupted: {e}") from e

                error_msg = str(e).lower()
                is_rate_limit = "429" in error_msg or "quota" in error_msg or "rate limit" in error_msg
                log_fn = logger.warning if is_rate_limit else logger.error
                log_fn(f"Provider failed ({provider}/{target_model}): {e}")
                last_error = e
                continue

            self.model = target_model
            self.provider = provider
            self.latency_ms = int((time.monotonic() - started_at) * 1000)
            self.finished = True
            logger.info(
                f"Completion finished: provider={provider} model={target_model} "
                f"tokens={self.total_tokens} latency={self.latency_ms}ms"
            )
            return

        logger.critical("All LLM providers failed")
        raise LLMError(f"All LLM providers failed. Last error: {last_error}")


class LLMClient:
    """
    Client for the hosted chat models.

    Example:
        >>> client = LLMClient()
        >>> stream = client.stream_chat("You are terse.", [{"role": "user", "content": "Hi"}])
        >>> for delta in stream:
        ...     print(delta, end="")
        >>> stream.total_tokens
        12
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        genai.configure(api_key=self.settings.google_api_key)

        self.groq_client: Optional[Groq] = None
        if self.settings.has_fallback_provider:
            self.groq_client = Groq(api_key=self.settings.groq_api_key)

        self.default_model = self.settings.chat_model
        self.temperature = self.settings.llm_temperature
        self.max_tokens = self.settings.llm_max_tokens
        self.timeout = self.settings.llm_timeout_seconds

        providers = "Gemini + Groq fallback" if self.groq_client else "Gemini"
        logger.info(f"LLM client initialized ({providers}), model={self.default_model}")

    def stream_chat(
        self,
        system_prompt: Optional[str],
        history: List[Dict[str, str]],
        model: Optional[str] = None,
    ) -> CompletionStream:
        """
        Prepare a streamed completion. Nothing is sent until it is iterated.

        Args:
            system_prompt: Persona prompt used as the system instruction
            history: ``[{"role": "user"|"assistant", "content": str}, ...]``
            model: Gemini model override
        """
        return CompletionStream(
            client=self,
            system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
            history=history,
            model=model or self.default_model,
        )

    def cascade(self, model: str) -> List[Tuple[str, str]]:
        """Providers to try, in order."""
        attempts = [("google", model)]
        if self.groq_client is not None:
            attempts.append(("groq", self.settings.fallback_model))
        return attempts

    def stream_provider(
        self,
        provider: str,
        model: str,
        system_prompt: str,
        history: List[Dict[str, str]],
    ) -> Iterator[Chunk]:
        if provider == "google":
            return self._stream_google(model, system_prompt, history)
        if provider == "groq":
            return self._stream_groq(model, system_prompt, history)
        raise LLMError(f"Unknown provider: {provider}")

    def _stream_google(
        self, model: str, system_prompt: str, history: List[Dict[str, str]]
    ) -> Iterator[Chunk]:
        """Stream from Google Gemini."""
        model_instance = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_prompt,
            generation_config=genai.types.GenerationConfig(
                temperature=self.temperature,
                max_output_tokens=self.max_tokens,
            ),
        )

        # OpenAI-style history -> Gemini contents
        contents = [
            {"role": "model" if msg["role"] == "assistant" else "user", "parts": [msg["content"]]}
            for msg in history
        ]

        response = model_instance.generate_content(
            contents,
            stream=True,
            request_options={"timeout": self.timeout},
        )
        for chunk in response:
            usage = getattr(chunk, "usage_metadata", None)
            tokens = getattr(usage, "total_token_count", None) if usage else None
            try:
                text = chunk.text
            except ValueError:
                # Chunk without text parts (finish reason or safety block)
                text = ""
            yield text, tokens

    def _stream_groq(
        self, model: str, system_prompt: str, history: List[Dict[str, str]]
    ) -> Iterator[Chunk]:
        """Stream from Groq."""
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history)

        stream = self.groq_client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=True,
        )
        for chunk in stream:
            delta = chunk.choices[0].delta.content if chunk.choices else None
            usage = getattr(getattr(chunk, "x_groq", None), "usage", None) or getattr(chunk, "usage", None)
            tokens = getattr(usage, "total_tokens", None) if usage else None
            yield delta or "", tokens


_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the shared LLM client."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client
