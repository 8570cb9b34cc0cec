"""
API Routes module - Endpoint definitions.

Each file in this module defines routes for a specific domain:
- chat.py          : Streaming persona chat
- conversations.py : chat.* RPC procedures
- personas.py      : personas.* RPC procedures
- payments.py      : payments.* RPC procedures
- users.py         : users.* RPC procedures
- health.py        : Health check endpoints
"""
from saaskit.api.routes.chat import router as chat_router
from saaskit.api.routes.conversations import router as conversations_router
from saaskit.api.routes.health import router as health_router
from saaskit.api.routes.payments import router as payments_router
from saaskit.api.routes.personas import router as personas_router
from saaskit.api.routes.users import router as users_router

__all__ = [
    "chat_router",
    "conversations_router",
    "health_router",
    "payments_router",
    "personas_router",
    "users_router",
]
