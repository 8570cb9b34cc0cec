"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request validation and parsing
- The UI message stream of the chat endpoint
- Error handling
- Route definitions
"""
from saaskit.api.main import app

__all__ = ["app"]
