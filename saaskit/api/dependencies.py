"""
Request dependencies shared by the routes.

Authentication happens in the gateway in front of this service; it
forwards the signed-in user's id in ``X-User-Id`` (and optionally the
e-mail in ``X-User-Email``). Procedures that need a user answer 401
when the header is missing or blank.
"""
from typing import Optional

from fastapi import Header

from saaskit.core.exceptions import AuthenticationError
from saaskit.services.user_service import get_user_service


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    x_user_email: Optional[str] = Header(default=None, alias="X-User-Email"),
) -> str:
    """
    The authenticated user id, provisioning the local user row on first sight.

    Raises:
        AuthenticationError: no user id was forwarded (HTTP 401)
    """
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise AuthenticationError()
    get_user_service().ensure_user(user_id, (x_user_email or "").strip() or None)
    return user_id
