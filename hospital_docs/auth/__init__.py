"""
Authentication module.

Session-cookie authentication for hospital staff accounts.
"""
from .models import User, Session, AuthContext, UserRole
from .repositories import (
    UserRepository,
    SessionRepository,
    InMemoryUserRepository,
    InMemorySessionRepository,
    UserNotFoundError,
    UserAlreadyExistsError,
    SessionNotFoundError,
)
from .services import SessionService, UserService, InvalidCredentialsError
from .utils import utcnow, hash_password, verify_password

__all__ = [
    'User',
    'Session',
    'AuthContext',
    'UserRole',
    'UserRepository',
    'SessionRepository',
    'InMemoryUserRepository',
    'InMemorySessionRepository',
    'UserNotFoundError',
    'UserAlreadyExistsError',
    'SessionNotFoundError',
    'SessionService',
    'UserService',
    'InvalidCredentialsError',
    'utcnow',
    'hash_password',
    'verify_password',
]
