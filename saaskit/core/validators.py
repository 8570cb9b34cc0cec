"""
Input Validators - request parsing and sanitization utilities.

- Flattening pydantic validation errors into ``{formErrors, fieldErrors}``
- Parsing a raw JSON body against a pydantic model
- Title sanitization for user-supplied conversation titles
"""
import json
import re
from typing import Any, Dict, List, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from saaskit.core.exceptions import RequestValidationFailed
from saaskit.core.logging_config import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

MAX_TITLE_LENGTH = 200


# FastAPI prefixes locations with where the value came from
REQUEST_LOCATIONS = ("body", "query", "path", "header", "cookie")


def flatten_errors(errors: Sequence[Dict[str, Any]]) -> RequestValidationFailed:
    """
    Group pydantic errors by top-level field.

    Errors without a location (e.g. the body is not an object) become
    form errors; everything else is listed under its first path element.
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}

    for error in errors:
        loc = tuple(error.get("loc") or ())
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        message = error.get("msg", "Invalid value")
        if not loc:
            form_errors.append(message)
            continue
        field_errors.setdefault(str(loc[0]), []).append(message)

    return RequestValidationFailed(form_errors=form_errors, field_errors=field_errors)


def flatten_validation_error(exc: PydanticValidationError) -> RequestValidationFailed:
    return flatten_errors(exc.errors())


def parse_body(raw: bytes, model: Type[ModelT]) -> ModelT:
    """
    Decode a JSON request body and validate it against ``model``.

    Raises:
        RequestValidationFailed: body is not JSON or does not match the schema
    """
    if not raw or not raw.strip():
        raise RequestValidationFailed(form_errors=["Request body is required"])

    try:
        payload: Any = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        raise RequestValidationFailed(form_errors=["Request body is not valid JSON"])

    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        failed = flatten_validation_error(e)
        logger.info(f"Rejected request body: {failed.flatten()}")
        raise failed


def sanitize_title(title: str, max_length: int = MAX_TITLE_LENGTH) -> str:
    """Strip null bytes, collapse whitespace and clamp to the column length."""
    if not title:
        return ""
    cleaned = title.replace("\x00", "").strip()
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned[:max_length]
