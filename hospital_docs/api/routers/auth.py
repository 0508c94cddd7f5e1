"""
Authentication router: register, login, logout, current user.

Sessions are carried in an HTTP-only cookie holding an opaque token.
"""
import logging

from fastapi import APIRouter, Depends, Request, Response, status

from hospital_docs.api.dependencies import (
    get_session_service,
    get_settings,
    get_user_service,
)
from hospital_docs.api.exceptions import AuthenticationError, ValidationError
from hospital_docs.api.schemas import LoginRequest, RegisterRequest, UserResponse
from hospital_docs.auth.dependencies import get_cookie_name, require_auth
from hospital_docs.auth.models import User, UserRole
from hospital_docs.auth.repositories import UserAlreadyExistsError
from hospital_docs.auth.services import InvalidCredentialsError, SessionService, UserService
from hospital_docs.core.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


async def _start_session(
    user: User,
    request: Request,
    response: Response,
    session_service: SessionService,
    settings: Settings,
) -> None:
    token, session = await session_service.create_session(
        user,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    response.set_cookie(
        key=get_cookie_name(settings.HTTPS_ONLY),
        value=token,
        max_age=settings.SESSION_DURATION_HOURS * 3600,
        httponly=True,
        secure=settings.HTTPS_ONLY,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    user_service: UserService = Depends(get_user_service),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Create a staff account and log it in."""
    try:
        user = await user_service.register(
            username=body.username,
            password=body.password,
            display_name=body.display_name,
            department=body.department,
            role=UserRole.STAFF.value,
            email=body.email,
            profile_image=body.profile_image,
        )
    except UserAlreadyExistsError:
        raise ValidationError("Username already exists")

    await _start_session(user, request, response, session_service, settings)
    return UserResponse.from_domain(user)


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    user_service: UserService = Depends(get_user_service),
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    try:
        user = await user_service.authenticate(body.username, body.password)
    except InvalidCredentialsError as e:
        raise AuthenticationError(str(e))

    await _start_session(user, request, response, session_service, settings)
    logger.info(f"User {user.id} logged in")
    return UserResponse.from_domain(user)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Drop the session if there is one. Always succeeds."""
    cookie_name = get_cookie_name(settings.HTTPS_ONLY)
    token = request.cookies.get(cookie_name)
    if token:
        await session_service.invalidate_session(token)
    response.delete_cookie(cookie_name, path="/")
    return {"success": True}


@router.get("/user", response_model=UserResponse)
async def current_user(user: User = Depends(require_auth)):
    return UserResponse.from_domain(user)
