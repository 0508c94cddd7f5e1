"""
Admin endpoints.

Every route requires the admin role: 401 when anonymous, 403 otherwise.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from hospital_docs.api.dependencies import get_document_service, get_user_service
from hospital_docs.api.exceptions import NotFoundError, ValidationError
from hospital_docs.api.schemas import (
    CreateUserRequest,
    DocumentResponse,
    RoleUpdateRequest,
    UserResponse,
)
from hospital_docs.api.services.document_service import DocumentService
from hospital_docs.auth.dependencies import require_admin
from hospital_docs.auth.models import User
from hospital_docs.auth.repositories import UserAlreadyExistsError, UserNotFoundError
from hospital_docs.auth.services import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=List[UserResponse])
async def admin_list_users(
    _: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    return [UserResponse.from_domain(u) for u in await user_service.list_users()]


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_user(
    body: CreateUserRequest,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    try:
        user = await user_service.register(
            username=body.username,
            password=body.password,
            display_name=body.display_name,
            department=body.department,
            role=body.role.value,
            email=body.email,
            profile_image=body.profile_image,
        )
    except UserAlreadyExistsError:
        raise ValidationError("Username already exists")
    logger.info(f"Admin {admin.id} created user {user.id} with role {user.role}")
    return UserResponse.from_domain(user)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def admin_update_role(
    user_id: int,
    body: RoleUpdateRequest,
    admin: User = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
):
    try:
        user = await user_service.update_role(user_id, body.role.value)
    except UserNotFoundError:
        raise NotFoundError("User", user_id)
    logger.info(f"Admin {admin.id} set role of user {user_id} to {user.role}")
    return UserResponse.from_domain(user)


@router.get("/documents", response_model=List[DocumentResponse])
async def admin_list_documents(
    _: User = Depends(require_admin),
    service: DocumentService = Depends(get_document_service),
):
    return [DocumentResponse.from_domain(d) for d in await service.list_documents()]
