"""Authentication repositories."""

import copy
from typing import Dict, List, Optional, Protocol, runtime_checkable

from .models import User, Session
from .utils import utcnow


class UserNotFoundError(Exception):
    """Raised when user is not found."""
    pass


class UserAlreadyExistsError(Exception):
    """Raised when user already exists."""
    pass


class SessionNotFoundError(Exception):
    """Raised when session is not found."""
    pass


@runtime_checkable
class UserRepository(Protocol):
    """Protocol for user storage."""

    async def create(self, user: User) -> User:
        """Create a new user. Assigns the id."""
        ...

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        ...

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username."""
        ...

    async def get_first_by_role(self, role: str) -> Optional[User]:
        """Get the lowest-id user holding a role."""
        ...

    async def update(self, user: User) -> User:
        """Update existing user."""
        ...

    async def list_all(self) -> List[User]:
        """List all users ordered by id."""
        ...


@runtime_checkable
class SessionRepository(Protocol):
    """Protocol for session storage."""

    async def create(self, session: Session) -> Session:
        """Create a new session."""
        ...

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        """Get session by token hash."""
        ...

    async def update(self, session: Session) -> Session:
        """Update session (e.g., last activity)."""
        ...

    async def delete(self, session_id: str) -> None:
        """Delete a session."""
        ...

    async def delete_expired(self) -> int:
        """Delete all expired sessions. Returns count deleted."""
        ...

    async def delete_by_user_id(self, user_id: int) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        ...


class InMemoryUserRepository:
    """In-memory implementation of UserRepository."""

    def __init__(self):
        self._users: Dict[int, User] = {}
        self._by_username: Dict[str, int] = {}
        self._next_id = 1

    async def create(self, user: User) -> User:
        if user.username in self._by_username:
            raise UserAlreadyExistsError(f"Username {user.username} already registered")

        stored = copy.deepcopy(user)
        stored.id = self._next_id
        self._next_id += 1

        self._users[stored.id] = stored
        self._by_username[stored.username] = stored.id
        return copy.deepcopy(stored)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        user_id = self._by_username.get(username)
        if user_id is None:
            return None
        return await self.get_by_id(user_id)

    async def get_first_by_role(self, role: str) -> Optional[User]:
        for user_id in sorted(self._users):
            if self._users[user_id].role == role:
                return copy.deepcopy(self._users[user_id])
        return None

    async def update(self, user: User) -> User:
        if user.id not in self._users:
            raise UserNotFoundError(f"User {user.id} not found")

        old_user = self._users[user.id]
        if old_user.username != user.username:
            if user.username in self._by_username:
                raise UserAlreadyExistsError(f"Username {user.username} already registered")
            del self._by_username[old_user.username]
            self._by_username[user.username] = user.id

        self._users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    async def list_all(self) -> List[User]:
        return [copy.deepcopy(self._users[uid]) for uid in sorted(self._users)]

    def clear(self) -> None:
        """Clear all users (for testing)."""
        self._users.clear()
        self._by_username.clear()
        self._next_id = 1


class InMemorySessionRepository:
    """In-memory implementation of SessionRepository."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._by_token_hash: Dict[str, str] = {}  # token_hash -> session_id

    async def create(self, session: Session) -> Session:
        self._sessions[session.session_id] = copy.deepcopy(session)
        self._by_token_hash[session.token_hash] = session.session_id
        return session

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        session_id = self._by_token_hash.get(token_hash)
        if session_id and session_id in self._sessions:
            return copy.deepcopy(self._sessions[session_id])
        return None

    async def update(self, session: Session) -> Session:
        if session.session_id not in self._sessions:
            raise SessionNotFoundError(f"Session {session.session_id} not found")
        self._sessions[session.session_id] = copy.deepcopy(session)
        return session

    async def delete(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session:
            self._by_token_hash.pop(session.token_hash, None)

    async def delete_expired(self) -> int:
        now = utcnow()
        expired_ids = [
            sid for sid, session in self._sessions.items()
            if session.expires_at <= now
        ]
        for session_id in expired_ids:
            await self.delete(session_id)
        return len(expired_ids)

    async def delete_by_user_id(self, user_id: int) -> int:
        session_ids = [
            sid for sid, session in self._sessions.items()
            if session.user_id == user_id
        ]
        for session_id in session_ids:
            await self.delete(session_id)
        return len(session_ids)

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        self._sessions.clear()
        self._by_token_hash.clear()
