"""
Models module - Pydantic schemas for data validation.

- chat.py : the streaming chat request and shared response models
- rpc.py  : inputs and outputs of the RPC procedures
"""
from saaskit.models.chat import (
    ChatRequest,
    UIMessage,
    HealthResponse,
    ErrorResponse,
)

__all__ = [
    "ChatRequest",
    "UIMessage",
    "HealthResponse",
    "ErrorResponse",
]
