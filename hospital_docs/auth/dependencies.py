"""
Authentication dependencies.

FastAPI dependencies for route protection and user context.
"""
import logging
from typing import Optional

from fastapi import Depends, Request

from hospital_docs.api.dependencies import get_session_service, get_settings
from hospital_docs.api.exceptions import AuthenticationError, PermissionDeniedError
from hospital_docs.auth.models import AuthContext, User
from hospital_docs.auth.services import SessionService
from hospital_docs.core.config import Settings

logger = logging.getLogger(__name__)


def get_cookie_name(https_only: bool) -> str:
    """Session cookie name, with the __Host- prefix when served over HTTPS only."""
    if https_only:
        return "__Host-session"
    return "session"


async def get_optional_user(
    request: Request,
    session_service: SessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
) -> Optional[AuthContext]:
    """
    Get current user from session cookie (optional).

    Returns None if not authenticated. Does NOT raise.
    """
    token = request.cookies.get(get_cookie_name(settings.HTTPS_ONLY))
    if not token:
        return None

    result = await session_service.validate_session(token)
    if not result:
        client = request.client.host if request.client else "unknown"
        logger.debug(f"Invalid/expired session token from {client}")
        return None

    user, session = result
    return AuthContext(user=user, session=session)


async def require_auth(
    context: Optional[AuthContext] = Depends(get_optional_user),
) -> User:
    """
    Require authentication and return the User.

    Raises:
        AuthenticationError: 401 if not authenticated
    """
    if context is None:
        raise AuthenticationError()
    return context.user


async def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Require the admin role.

    Raises:
        PermissionDeniedError: 403 for authenticated non-admins
    """
    if not user.is_admin:
        raise PermissionDeniedError("Admin access required")
    return user
