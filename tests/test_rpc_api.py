"""Tests for the /rpc procedures used by the dashboard."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from conftest import (
    OTHER_USER_ID,
    USER_ID,
    create_conversation,
    create_members_only_persona,
    create_message,
    create_user,
    grant_membership,
)
from saaskit.database.connection import get_database
from saaskit.database.models import Message, PaymentRecord


class TestGetConversations:
    def test_requires_user(self, client):
        resp = client.get("/rpc/chat.getConversations")
        assert resp.status_code == 401

    def test_lists_own_conversations_newest_first(self, client, auth_headers):
        now = datetime.utcnow()
        older = create_conversation(USER_ID, title="Older", created_at=now - timedelta(hours=1))
        newer = create_conversation(USER_ID, title="Newer", created_at=now)
        create_conversation(OTHER_USER_ID, title="Not mine")

        resp = client.get("/rpc/chat.getConversations", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert [c["id"] for c in data] == [newer.id, older.id]
        assert data[0]["userId"] == USER_ID
        assert data[0]["messageCount"] == 0
        assert data[0]["isArchived"] is False

    def test_archived_filter(self, client, auth_headers):
        active = create_conversation(USER_ID, title="Active")
        create_conversation(USER_ID, title="Archived", is_archived=True)

        all_resp = client.get("/rpc/chat.getConversations", headers=auth_headers)
        assert len(all_resp.json()) == 2

        resp = client.get(
            "/rpc/chat.getConversations",
            params={"includeArchived": "false"},
            headers=auth_headers,
        )
        assert [c["id"] for c in resp.json()] == [active.id]


class TestGetMessages:
    def test_messages_in_order(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        now = datetime.utcnow()
        create_message(conversation.id, "user", "Hi", created_at=now - timedelta(seconds=2))
        create_message(conversation.id, "assistant", "Hello!", created_at=now - timedelta(seconds=1))

        resp = client.get(
            "/rpc/chat.getMessages",
            params={"conversationId": conversation.id},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert [(m["role"], m["content"]) for m in resp.json()] == [
            ("user", "Hi"),
            ("assistant", "Hello!"),
        ]
        assert resp.json()[0]["conversationId"] == conversation.id

    def test_other_users_conversation_is_not_found(self, client, auth_headers):
        foreign = create_conversation(OTHER_USER_ID)
        create_message(foreign.id, "user", "secret")

        resp = client.get(
            "/rpc/chat.getMessages",
            params={"conversationId": foreign.id},
            headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "Conversation not found"

    def test_conversation_id_is_required(self, client, auth_headers):
        resp = client.get("/rpc/chat.getMessages", headers=auth_headers)
        assert resp.status_code == 400
        assert "conversationId" in resp.json()["error"]["fieldErrors"]


class TestConversationMutations:
    def test_rename(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        resp = client.post(
            "/rpc/chat.renameConversation",
            json={"conversationId": conversation.id, "title": "  Launch   plan "},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Launch plan"

    def test_rename_rejects_empty_title(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        resp = client.post(
            "/rpc/chat.renameConversation",
            json={"conversationId": conversation.id, "title": ""},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "title" in resp.json()["error"]["fieldErrors"]

    def test_rename_foreign_conversation(self, client, auth_headers):
        foreign = create_conversation(OTHER_USER_ID, title="Theirs")
        resp = client.post(
            "/rpc/chat.renameConversation",
            json={"conversationId": foreign.id, "title": "Mine now"},
            headers=auth_headers,
        )
        assert resp.status_code == 404

    def test_archive_and_unarchive(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        resp = client.post(
            "/rpc/chat.archiveConversation",
            json={"conversationId": conversation.id},
            headers=auth_headers,
        )
        assert resp.json()["isArchived"] is True

        resp = client.post(
            "/rpc/chat.archiveConversation",
            json={"conversationId": conversation.id, "archived": False},
            headers=auth_headers,
        )
        assert resp.json()["isArchived"] is False

    def test_delete_removes_messages(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        create_message(conversation.id, "user", "Hi")
        create_message(conversation.id, "assistant", "Hello")

        resp = client.post(
            "/rpc/chat.deleteConversation",
            json={"conversationId": conversation.id},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json() == {"id": conversation.id, "deleted": True}

        with get_database().get_session() as session:
            assert session.query(Message).count() == 0

        listing = client.get("/rpc/chat.getConversations", headers=auth_headers)
        assert listing.json() == []

    def test_delete_foreign_conversation(self, client, auth_headers):
        foreign = create_conversation(OTHER_USER_ID)
        resp = client.post(
            "/rpc/chat.deleteConversation",
            json={"conversationId": foreign.id},
            headers=auth_headers,
        )
        assert resp.status_code == 404

    def test_missing_body(self, client, auth_headers):
        resp = client.post("/rpc/chat.deleteConversation", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"


class TestRateMessage:
    def test_rate(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        message = create_message(conversation.id, "assistant", "Answer")

        resp = client.post(
            "/rpc/chat.rateMessage",
            json={"messageId": message.id, "rating": 5, "feedback": "Spot on"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["rating"] == 5
        assert resp.json()["feedback"] == "Spot on"

    def test_rating_out_of_range(self, client, auth_headers):
        conversation = create_conversation(USER_ID)
        message = create_message(conversation.id, "assistant", "Answer")

        resp = client.post(
            "/rpc/chat.rateMessage",
            json={"messageId": message.id, "rating": 6},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        assert "rating" in resp.json()["error"]["fieldErrors"]

    def test_foreign_message(self, client, auth_headers):
        foreign = create_conversation(OTHER_USER_ID)
        message = create_message(foreign.id, "assistant", "Answer")

        resp = client.post(
            "/rpc/chat.rateMessage",
            json={"messageId": message.id, "rating": 1},
            headers=auth_headers,
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "Message not found"


class TestPersonas:
    def test_public_without_user(self, client, personas):
        resp = client.get("/rpc/personas.list")
        assert resp.status_code == 200
        keys = [p["key"] for p in resp.json()]
        assert keys == ["AI Engineer Specialist", "Marketing Specialist", "Strategy Specialist"]

    def test_german_locale(self, client, personas):
        resp = client.get("/rpc/personas.list", params={"locale": "de"})
        marketing = next(p for p in resp.json() if p["key"] == "Marketing Specialist")
        assert marketing["name"] == "Marketing-Spezialist"
        # no German prompt seeded, English is the fallback
        assert marketing["prompt"].startswith("You are a world-class marketing specialist")
        assert marketing["requiresMembership"] is False

    def test_unsupported_locale(self, client, personas):
        resp = client.get("/rpc/personas.list", params={"locale": "fr"})
        assert resp.status_code == 400
        assert "locale" in resp.json()["error"]["fieldErrors"]

    def test_members_only_flag(self, client, personas):
        create_members_only_persona()
        resp = client.get("/rpc/personas.list")
        premium = next(p for p in resp.json() if p["key"] == "Premium Advisor")
        assert premium["requiresMembership"] is True


class TestUsers:
    def test_me(self, client, auth_headers):
        resp = client.get("/rpc/users.me", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == USER_ID
        assert data["email"] == "alice@example.com"
        assert data["language"] == "en"
        assert data["isAdmin"] is False

    def test_admin_flag(self, client, auth_headers):
        create_user(USER_ID, admin_level=1)
        resp = client.get("/rpc/users.me", headers=auth_headers)
        assert resp.json()["isAdmin"] is True

    def test_requires_user(self, client):
        assert client.get("/rpc/users.me").status_code == 401

    def test_user_header_is_trimmed(self, client):
        resp = client.get("/rpc/users.me", headers={"X-User-Id": "  user_carol  "})
        assert resp.status_code == 200
        assert resp.json()["id"] == "user_carol"
        assert resp.json()["email"] is None


class TestPayments:
    def test_plans_are_public_and_ordered(self, client, plans):
        resp = client.get("/rpc/payments.getPlans")
        assert resp.status_code == 200
        data = resp.json()
        assert [p["name"] for p in data] == ["Free", "Professional", "Enterprise"]
        assert Decimal(data[1]["price"]) == Decimal("19.00")
        assert data[2]["durationType"] == "yearly"

    def test_plans_in_german(self, client, plans):
        resp = client.get("/rpc/payments.getPlans", params={"locale": "de"})
        assert resp.json()[0]["name"] == "Kostenlos"

    def test_membership_status_without_membership(self, client, auth_headers, plans):
        resp = client.get("/rpc/payments.getMembershipStatus", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"hasActiveMembership": False, "currentPlan": None, "membership": None}

    def test_membership_status_with_membership(self, client, auth_headers, plans):
        grant_membership(USER_ID)
        resp = client.get("/rpc/payments.getMembershipStatus", headers=auth_headers)
        data = resp.json()
        assert data["hasActiveMembership"] is True
        assert data["currentPlan"]["name"] == "Professional"
        assert data["membership"]["status"] == "active"

    def test_payment_history(self, client, auth_headers):
        create_user(USER_ID)
        now = datetime.utcnow()
        with get_database().get_session() as session:
            for days_ago in range(3):
                session.add(PaymentRecord(
                    user_id=USER_ID,
                    amount=Decimal("19.00"),
                    status="succeeded",
                    description=f"payment-{days_ago}",
                    created_at=now - timedelta(days=days_ago),
                ))

        resp = client.get(
            "/rpc/payments.getPaymentHistory", params={"limit": 2}, headers=auth_headers
        )
        assert resp.status_code == 200
        assert [p["description"] for p in resp.json()] == ["payment-0", "payment-1"]

    def test_payment_history_limit_bounds(self, client, auth_headers):
        resp = client.get(
            "/rpc/payments.getPaymentHistory", params={"limit": 0}, headers=auth_headers
        )
        assert resp.status_code == 400


class TestStorageFailures:
    def test_database_failure_is_generic_500(self, app, auth_headers, monkeypatch):
        from saaskit.core import exceptions
        from saaskit.services.conversation_service import ConversationService

        def unavailable(self, user_id, include_archived=True):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(ConversationService, "list_conversations", unavailable)
        client = TestClient(app, raise_server_exceptions=False)

        resp = client.get("/rpc/chat.getConversations", headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"
        assert "locked" not in resp.json()["error"]
        # storage errors have no dedicated application error type
        assert not hasattr(exceptions, "DatabaseError")
