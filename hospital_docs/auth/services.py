"""Authentication services."""

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from .models import User, Session, UserRole
from .repositories import (
    UserRepository,
    SessionRepository,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from .utils import (
    utcnow,
    hash_password,
    verify_password,
    generate_session_id,
    generate_session_token,
    hash_token,
)

logger = logging.getLogger(__name__)


class InvalidCredentialsError(Exception):
    """Username unknown or password mismatch."""
    pass


class SessionService:
    """Service for managing user sessions."""

    def __init__(
        self,
        session_repo: SessionRepository,
        user_repo: UserRepository,
        session_duration: timedelta = timedelta(hours=24),
    ):
        self._session_repo = session_repo
        self._user_repo = user_repo
        self._session_duration = session_duration

    async def create_session(
        self,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[str, Session]:
        """
        Create a new session for a user.

        Returns:
            Tuple of (raw_token, session)
            The raw_token should be sent to the client (only returned once).
        """
        token = generate_session_token()
        now = utcnow()

        session = Session(
            session_id=generate_session_id(),
            user_id=user.id,
            token_hash=hash_token(token),
            created_at=now,
            expires_at=now + self._session_duration,
            last_activity=now,
            ip_address=ip_address,
            user_agent=user_agent,
        )

        await self._session_repo.create(session)
        logger.info(f"Created session {session.session_id} for user {user.id}")

        return token, session

    async def validate_session(self, token: str) -> Optional[Tuple[User, Session]]:
        """
        Validate a session token.

        Returns:
            Tuple of (user, session) if valid, None otherwise.
        """
        session = await self._session_repo.get_by_token_hash(hash_token(token))

        if not session:
            return None

        if session.is_expired():
            logger.info(f"Session {session.session_id} expired")
            await self._session_repo.delete(session.session_id)
            return None

        user = await self._user_repo.get_by_id(session.user_id)
        if not user:
            await self._session_repo.delete(session.session_id)
            return None

        session.last_activity = utcnow()
        await self._session_repo.update(session)

        return user, session

    async def invalidate_session(self, token: str) -> bool:
        """
        Invalidate a session by token.

        Returns:
            True if session was found and deleted, False otherwise.
        """
        session = await self._session_repo.get_by_token_hash(hash_token(token))

        if session:
            await self._session_repo.delete(session.session_id)
            return True

        return False

    async def cleanup_expired(self) -> int:
        """Remove all expired sessions."""
        return await self._session_repo.delete_expired()


class UserService:
    """Service for registering, authenticating and administering users."""

    def __init__(self, user_repo: UserRepository):
        self._user_repo = user_repo

    async def register(
        self,
        username: str,
        password: str,
        display_name: str,
        department: str,
        role: str = UserRole.STAFF.value,
        email: Optional[str] = None,
        profile_image: Optional[str] = None,
    ) -> User:
        """
        Create a user with a hashed password.

        Raises:
            UserAlreadyExistsError: username taken
        """
        if await self._user_repo.get_by_username(username):
            raise UserAlreadyExistsError(f"Username {username} already registered")

        user = User(
            username=username,
            password=hash_password(password),
            display_name=display_name,
            department=department,
            role=role,
            email=email,
            profile_image=profile_image,
        )
        created = await self._user_repo.create(user)
        logger.info(f"Registered user {created.id} ({created.username}, role={created.role})")
        return created

    async def authenticate(self, username: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            InvalidCredentialsError: unknown user or wrong password
        """
        user = await self._user_repo.get_by_username(username)
        if not user or not verify_password(password, user.password):
            logger.warning(f"Failed login for username={username!r}")
            raise InvalidCredentialsError("Invalid username or password")
        return user

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._user_repo.get_by_id(user_id)

    async def list_users(self) -> List[User]:
        return await self._user_repo.list_all()

    async def update_role(self, user_id: int, role: str) -> User:
        """Change a user's role."""
        user = await self._user_repo.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        user.role = role
        await self._user_repo.update(user)
        logger.info(f"User {user_id} role changed to {role}")
        return user
