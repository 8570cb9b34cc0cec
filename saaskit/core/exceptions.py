"""
Custom Exceptions - Application-specific error classes.

Each exception carries an HTTP status code and a machine-readable error
code. The API layer turns them into JSON error responses; no stack traces
are leaked in production.
"""
from typing import Any, Dict, List, Optional


class SaasKitException(Exception):
    """
    Base exception for all application errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.message,
            "code": self.error_code,
            "details": self.details,
        }


class AuthenticationError(SaasKitException):
    """Raised when a request carries no authenticated user."""
    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class MembershipRequiredError(SaasKitException):
    """Raised when a members-only resource is used without an active membership."""
    status_code = 403
    error_code = "membership_required"

    def __init__(self, message: str = "Membership required"):
        super().__init__(message)


class NotFoundError(SaasKitException):
    """Raised when a requested record does not exist or is not visible to the user."""
    status_code = 404
    error_code = "not_found"


class PersonaNotFoundError(NotFoundError):
    error_code = "persona_not_found"

    def __init__(self, persona: str):
        super().__init__("Persona not found", details=f"persona={persona}")
        self.persona = persona


class ConversationNotFoundError(NotFoundError):
    error_code = "conversation_not_found"

    def __init__(self, conversation_id: str):
        super().__init__("Conversation not found", details=f"conversation_id={conversation_id}")
        self.conversation_id = conversation_id


class MessageNotFoundError(NotFoundError):
    error_code = "message_not_found"

    def __init__(self, message_id: str):
        super().__init__("Message not found", details=f"message_id={message_id}")
        self.message_id = message_id


class RequestValidationFailed(SaasKitException):
    """
    Raised when a request body fails schema validation.

    Carries the flattened error structure ``{formErrors, fieldErrors}``
    which is returned verbatim as the ``error`` value.
    """
    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        form_errors: Optional[List[str]] = None,
        field_errors: Optional[Dict[str, List[str]]] = None,
    ):
        self.form_errors = form_errors or []
        self.field_errors = field_errors or {}
        super().__init__("Invalid request body")

    def flatten(self) -> Dict[str, Any]:
        return {"formErrors": self.form_errors, "fieldErrors": self.field_errors}

    def to_dict(self) -> dict:
        return {"error": self.flatten(), "code": self.error_code}


class RateLimitExceeded(SaasKitException):
    """Raised when a client exceeds the rate limit."""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Rate limit exceeded. Please wait {retry_after} seconds.",
            details=f"retry_after={retry_after}"
        )
        self.retry_after = retry_after


class LLMError(SaasKitException):
    """Raised when every configured LLM provider failed."""
    status_code = 503
    error_code = "llm_error"

    def __init__(self, message: str = "LLM service unavailable"):
        super().__init__(message)
