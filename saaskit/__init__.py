"""
SaasKit chat backend.

This package contains all application source code organized by responsibility:
- api/       : FastAPI routes, the chat stream and RPC procedures
- core/      : Configuration, logging, errors and cross-cutting utilities
- services/  : Business logic and orchestration
- llm/       : Hosted model integration (Gemini with Groq fallback)
- database/  : ORM models, sessions, table creation and seed data
- models/    : Pydantic models for request/response schemas
"""
__version__ = "1.0.0"
