"""
User RPC procedures.

- GET /rpc/users.me
"""
from fastapi import APIRouter, Depends

from saaskit.api.dependencies import get_current_user_id
from saaskit.models.rpc import UserOut
from saaskit.services.user_service import UserService, get_user_service

router = APIRouter(prefix="/rpc", tags=["RPC: users"])


@router.get("/users.me", response_model=UserOut)
def me(
    user_id: str = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service),
):
    """The signed-in user's profile, including the admin flag the navigation uses."""
    return service.get_user(user_id)
