"""
Database Models - SQLAlchemy ORM models.

This module defines the relational schema of the service:
- Users (ids issued by the external auth provider)
- Conversations, messages and prompt templates (personas)
- Membership plans, user memberships and payment records

Referential integrity is declared on the foreign keys
(message -> conversation -> user cascade on delete) and mirrored on the
ORM relationships.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


# ============================================================
# Enums
# ============================================================

class ConversationType(str, Enum):
    CHAT = "chat"
    USE_CASE = "use_case"
    TUTORIAL = "tutorial"
    BLOG = "blog"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class PromptCategory(str, Enum):
    GENERAL = "general"
    BUSINESS = "business"
    CREATIVE = "creative"
    TECHNICAL = "technical"
    EDUCATION = "education"
    MARKETING = "marketing"


class VariableType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"


class Language(str, Enum):
    EN = "en"
    DE = "de"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"


class DurationType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    PENDING = "pending"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentSource(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    MANUAL = "manual"


# ============================================================
# Users
# ============================================================

class User(Base):
    """
    A signed-in user.

    Rows are provisioned the first time the auth gateway forwards an id.
    """
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=True)
    display_name = Column(String(200), nullable=True)
    language = Column(String(5), default=Language.EN.value, nullable=False)
    admin_level = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    conversations = relationship(
        "Conversation",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    memberships = relationship(
        "UserMembership",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments = relationship(
        "PaymentRecord",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return (self.admin_level or 0) > 0


# ============================================================
# AI conversations
# ============================================================

class Conversation(Base):
    """An ordered group of messages between one user and a persona."""
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=True)
    model = Column(String(50), nullable=False)
    type = Column(String(50), default=ConversationType.CHAT.value)

    # statistics
    message_count = Column(Integer, default=0, nullable=False)
    total_tokens = Column(Integer, default=0, nullable=False)
    total_cost = Column(Numeric(10, 6), default=Decimal("0"), nullable=False)

    # status
    is_archived = Column(Boolean, default=False, nullable=False)
    is_shared = Column(Boolean, default=False, nullable=False)
    last_message_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )

    __table_args__ = (
        Index("conversations_user_id_idx", "user_id"),
        Index("conversations_type_idx", "type"),
        Index("conversations_last_message_idx", "last_message_at"),
        Index("conversations_archived_idx", "is_archived"),
    )


class Message(Base):
    """A single chat message plus the model metadata of assistant replies."""
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    conversation_id = Column(
        String(36), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )

    role = Column(String(20), nullable=False)  # user, assistant, system
    content = Column(Text, nullable=False)

    # AI metadata
    tokens = Column(Integer, default=0)
    cost = Column(Numeric(10, 6), default=Decimal("0"))
    model = Column(String(50), nullable=True)
    latency = Column(Integer, nullable=True)  # ms

    # evaluation
    rating = Column(Integer, nullable=True)  # 1-5
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index("messages_conversation_id_idx", "conversation_id"),
        Index("messages_role_idx", "role"),
        Index("messages_created_at_idx", "created_at"),
    )

    def to_llm_format(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class PromptTemplate(Base):
    """
    A prompt template. System templates double as chat personas.

    ``variables`` holds a list of
    ``{name, type, description, required, defaultValue?, options?}`` dicts.
    """
    __tablename__ = "prompt_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)

    name = Column(String(200), nullable=False, unique=True)
    name_de = Column(String(200), nullable=True)
    description = Column(Text, nullable=True)
    description_de = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)

    prompt = Column(Text, nullable=False)
    prompt_de = Column(Text, nullable=True)

    variables = Column(JSON, default=list)

    # access control
    is_public = Column(Boolean, default=False, nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    requires_membership = Column(Boolean, default=False, nullable=False)

    # statistics
    use_count = Column(Integer, default=0, nullable=False)
    rating = Column(Numeric(3, 2), default=Decimal("0"))

    tags = Column(JSON, default=list)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("prompt_templates_user_id_idx", "user_id"),
        Index("prompt_templates_category_idx", "category"),
        Index("prompt_templates_public_idx", "is_public"),
        Index("prompt_templates_system_idx", "is_system"),
    )

    def localized(self, locale: str = Language.EN.value) -> Dict[str, Any]:
        """Name, description and prompt in ``locale``, falling back to English."""
        german = locale == Language.DE.value
        return {
            "name": (self.name_de if german and self.name_de else self.name),
            "description": (
                self.description_de if german and self.description_de else self.description
            ),
            "prompt": (self.prompt_de if german and self.prompt_de else self.prompt),
        }


# ============================================================
# Memberships and payments
# ============================================================

class MembershipPlan(Base):
    __tablename__ = "membership_plans"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False, unique=True)
    name_de = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    description_de = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    currency = Column(String(3), default=Currency.USD.value, nullable=False)
    duration_type = Column(String(20), default=DurationType.MONTHLY.value, nullable=False)
    duration_days = Column(Integer, default=30, nullable=False)
    features = Column(JSON, default=list)

    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class UserMembership(Base):
    """A user's subscription to a plan for a bounded period."""
    __tablename__ = "user_memberships"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    plan_id = Column(String(36), ForeignKey("membership_plans.id"), nullable=False)

    status = Column(String(20), default=MembershipStatus.PENDING.value, nullable=False)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime, nullable=False)
    auto_renew = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="memberships")
    plan = relationship("MembershipPlan")

    __table_args__ = (
        Index("user_memberships_user_id_idx", "user_id"),
        Index("user_memberships_status_idx", "status"),
    )

    def is_active_at(self, moment: datetime) -> bool:
        return self.status == MembershipStatus.ACTIVE.value and self.end_date > moment


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    plan_id = Column(String(36), ForeignKey("membership_plans.id"), nullable=True)
    membership_id = Column(
        String(36), ForeignKey("user_memberships.id", ondelete="SET NULL"), nullable=True
    )

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default=Currency.USD.value, nullable=False)
    status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False)
    source = Column(String(20), default=PaymentSource.STRIPE.value, nullable=False)
    external_id = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="payments")
    plan = relationship("MembershipPlan")

    __table_args__ = (
        Index("payment_records_user_id_idx", "user_id"),
        Index("payment_records_status_idx", "status"),
    )
