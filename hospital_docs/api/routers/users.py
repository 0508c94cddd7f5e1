"""User directory (read only)."""

from typing import List

from fastapi import APIRouter, Depends

from hospital_docs.api.dependencies import get_user_service
from hospital_docs.api.exceptions import NotFoundError
from hospital_docs.api.schemas import UserResponse
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User
from hospital_docs.auth.services import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    _: User = Depends(require_auth),
    user_service: UserService = Depends(get_user_service),
):
    return [UserResponse.from_domain(u) for u in await user_service.list_users()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    _: User = Depends(require_auth),
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.get_user(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return UserResponse.from_domain(user)
