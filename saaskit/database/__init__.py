"""
Database module - relational storage layer.

This module handles:
- Engine and session management
- ORM models for users, conversations, personas, memberships and payments
- Table creation and seed data
"""
from saaskit.database.connection import DatabaseConnection, get_database, reset_database
from saaskit.database.models import (
    Base,
    Conversation,
    ConversationType,
    MembershipPlan,
    MembershipStatus,
    Message,
    MessageRole,
    PaymentRecord,
    PaymentStatus,
    PromptTemplate,
    User,
    UserMembership,
)
from saaskit.database.init_db import init_tables, drop_tables

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    "reset_database",
    # Models
    "Base",
    "User",
    "Conversation",
    "ConversationType",
    "Message",
    "MessageRole",
    "PromptTemplate",
    "MembershipPlan",
    "MembershipStatus",
    "UserMembership",
    "PaymentRecord",
    "PaymentStatus",
    # Init
    "init_tables",
    "drop_tables",
]
