"""Root conftest - shared fixtures for all tests."""

from __future__ import annotations

import json
import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

# Ensure the project root is importable without an install
_root_dir = str(Path(__file__).resolve().parent.parent)
if _root_dir not in sys.path:
    sys.path.insert(0, _root_dir)

# Settings are read on import of the app, so the environment goes first
os.environ["APP_ENV"] = "test"
os.environ["GOOGLE_API_KEY"] = "test-google-key"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="saaskit-logs-")
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ.pop("GROQ_API_KEY", None)
os.environ.pop("CORS_ORIGINS", None)

import pytest
from fastapi.testclient import TestClient

from saaskit.core.config import get_settings
from saaskit.core.exceptions import LLMError
from saaskit.core.rate_limiter import reset_rate_limiter
from saaskit.database.connection import get_database, reset_database
from saaskit.database.models import (
    Base,
    Conversation,
    MembershipPlan,
    MembershipStatus,
    Message,
    PromptTemplate,
    User,
    UserMembership,
)
from saaskit.database.seed import seed_personas, seed_plans

get_settings.cache_clear()

USER_ID = "user_alice"
OTHER_USER_ID = "user_bob"


# ---------------------------------------------------------------------------
# Fake LLM
# ---------------------------------------------------------------------------

class FakeStream:
    """Stands in for CompletionStream: yields fixed chunks, then reports usage."""

    def __init__(self, chunks: List[str], total_tokens: int, fail_after: Optional[int], error: Exception):
        self._chunks = chunks
        self._fail_after = fail_after
        self._error = error
        self.text = ""
        self.total_tokens = 0
        self.model: Optional[str] = None
        self.latency_ms: Optional[int] = None
        self._usage = total_tokens

    def __iter__(self):
        for index, chunk in enumerate(self._chunks):
            if self._fail_after is not None and index >= self._fail_after:
                raise self._error
            self.text += chunk
            yield chunk
        self.total_tokens = self._usage
        self.model = "gemini-test"
        self.latency_ms = 12


class FakeLLMClient:
    default_model = "gemini-test"

    def __init__(self):
        self.chunks = ["Hello", " world"]
        self.total_tokens = 42
        self.fail_after: Optional[int] = None
        self.error: Exception = LLMError("Model stream interrupted")
        self.calls: List[Dict] = []

    def stream_chat(self, system_prompt, history, model=None):
        self.calls.append({"system_prompt": system_prompt, "history": history, "model": model})
        return FakeStream(self.chunks, self.total_tokens, self.fail_after, self.error)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _setup_db():
    """Fresh in-memory database with all tables for each test."""
    db = reset_database("sqlite:///:memory:")
    Base.metadata.create_all(bind=db.engine)
    yield db
    Base.metadata.drop_all(bind=db.engine)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    reset_rate_limiter()
    yield
    reset_rate_limiter()


@pytest.fixture
def personas():
    with get_database().get_session() as session:
        seed_personas(session)


@pytest.fixture
def plans():
    with get_database().get_session() as session:
        seed_plans(session)


def create_user(user_id: str = USER_ID, **kwargs) -> User:
    with get_database().get_session() as session:
        user = User(id=user_id, **kwargs)
        session.add(user)
    return user


def create_conversation(user_id: str = USER_ID, **kwargs) -> Conversation:
    kwargs.setdefault("title", "Chat with Marketing Specialist")
    kwargs.setdefault("model", "gemini-test")
    with get_database().get_session() as session:
        if session.get(User, user_id) is None:
            session.add(User(id=user_id))
            session.flush()
        conversation = Conversation(user_id=user_id, **kwargs)
        session.add(conversation)
    return conversation


def create_message(conversation_id: str, role: str = "user", content: str = "Hi", **kwargs) -> Message:
    with get_database().get_session() as session:
        message = Message(conversation_id=conversation_id, role=role, content=content, **kwargs)
        session.add(message)
    return message


def create_members_only_persona(name: str = "Premium Advisor") -> PromptTemplate:
    with get_database().get_session() as session:
        persona = PromptTemplate(
            name=name,
            category="business",
            prompt="You are a premium advisor.",
            is_public=True,
            requires_membership=True,
        )
        session.add(persona)
    return persona


def grant_membership(user_id: str = USER_ID, days: int = 30, status: str = MembershipStatus.ACTIVE.value) -> UserMembership:
    with get_database().get_session() as session:
        if session.get(User, user_id) is None:
            session.add(User(id=user_id))
        plan = session.query(MembershipPlan).filter(MembershipPlan.name == "Professional").first()
        if plan is None:
            plan = MembershipPlan(name="Professional", price=19, duration_days=30)
            session.add(plan)
            session.flush()
        now = datetime.utcnow()
        membership = UserMembership(
            user_id=user_id,
            plan_id=plan.id,
            status=status,
            start_date=now - timedelta(days=1),
            end_date=now + timedelta(days=days),
        )
        session.add(membership)
    return membership


# ---------------------------------------------------------------------------
# App and clients
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def app(fake_llm):
    """The FastAPI app with the chat service bound to the fake LLM."""
    from saaskit.api.main import app as _app
    from saaskit.services.chat_service import ChatService, get_chat_service

    _app.dependency_overrides[get_chat_service] = lambda: ChatService(llm_client=fake_llm)
    yield _app
    _app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"X-User-Id": USER_ID, "X-User-Email": "alice@example.com"}


@pytest.fixture
def other_headers():
    return {"X-User-Id": OTHER_USER_ID}


def chat_body(
    persona: str = "Marketing Specialist",
    text: str = "Hello",
    conversation_id: Optional[str] = None,
    messages: Optional[List[Dict]] = None,
) -> Dict:
    body = {
        "id": "chat-1",
        "persona": persona,
        "messages": messages if messages is not None else [
            {"id": "m1", "role": "user", "parts": [{"type": "text", "text": text}]}
        ],
        "trigger": "submit-message",
    }
    if conversation_id is not None:
        body["conversationId"] = conversation_id
    return body


def parse_events(raw: str) -> List:
    """Split a UI message stream body into decoded events ('[DONE]' stays a string)."""
    events = []
    for frame in raw.split("\n\n"):
        frame = frame.strip()
        if not frame:
            continue
        assert frame.startswith("data: ")
        payload = frame[len("data: "):]
        events.append(payload if payload == "[DONE]" else json.loads(payload))
    return events
