"""
Typed inputs and outputs of the RPC procedures.

Field names are snake_case in Python and camelCase on the wire, which is
what the dashboard reads.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RPCModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================
# chat.*
# ============================================================

class ConversationOut(RPCModel):
    id: str
    user_id: str
    title: Optional[str] = None
    model: str
    type: Optional[str] = None
    message_count: int = 0
    total_tokens: int = 0
    total_cost: Decimal = Decimal("0")
    is_archived: bool = False
    is_shared: bool = False
    last_message_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MessageOut(RPCModel):
    id: str
    conversation_id: str
    role: str
    content: str
    tokens: Optional[int] = 0
    cost: Optional[Decimal] = Decimal("0")
    model: Optional[str] = None
    latency: Optional[int] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    created_at: datetime


class ConversationIdInput(RPCModel):
    conversation_id: str = Field(..., min_length=1)


class RenameConversationInput(ConversationIdInput):
    title: str = Field(..., min_length=1, max_length=200)


class ArchiveConversationInput(ConversationIdInput):
    archived: bool = True


class RateMessageInput(RPCModel):
    message_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(default=None, max_length=2000)


class DeleteResult(RPCModel):
    id: str
    deleted: bool


# ============================================================
# personas.*
# ============================================================

class PersonaOut(RPCModel):
    id: str
    key: str = Field(..., description="Stable persona name to send as `persona` to /api/chat")
    name: str
    description: Optional[str] = None
    prompt: str
    category: str
    requires_membership: bool = False
    tags: List[str] = Field(default_factory=list)
    variables: List[Dict[str, Any]] = Field(default_factory=list)


# ============================================================
# users.*
# ============================================================

class UserOut(RPCModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    language: str
    admin_level: int = 0
    is_admin: bool = False
    created_at: datetime


# ============================================================
# payments.*
# ============================================================

class PlanOut(RPCModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    currency: str
    duration_type: str
    duration_days: int
    features: List[str] = Field(default_factory=list)
    sort_order: int = 0


class MembershipOut(RPCModel):
    id: str
    plan_id: str
    status: str
    start_date: datetime
    end_date: datetime
    auto_renew: bool = False


class MembershipStatusOut(RPCModel):
    has_active_membership: bool
    current_plan: Optional[PlanOut] = None
    membership: Optional[MembershipOut] = None


class PaymentOut(RPCModel):
    id: str
    plan_id: Optional[str] = None
    membership_id: Optional[str] = None
    amount: Decimal
    currency: str
    status: str
    source: str
    description: Optional[str] = None
    created_at: datetime
