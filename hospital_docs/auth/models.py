"""
Authentication data models.

Defines core domain models for the auth system:
- User: hospital staff identity with role and department
- Session: cookie-backed web session
- UserRole: role names used by workflows and admin checks
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    """Roles a user can hold."""
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


@dataclass
class User:
    """
    Core user identity.

    `password` holds the scrypt hash, never the plain text.
    """
    username: str
    password: str
    display_name: str
    department: str
    role: str = UserRole.STAFF.value
    email: Optional[str] = None
    profile_image: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


@dataclass
class Session:
    """
    Web session.

    The raw token lives only in the client cookie; the server keeps its hash.
    """
    session_id: str
    user_id: int
    token_hash: str
    created_at: datetime
    expires_at: datetime
    last_activity: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def is_expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at

    def is_valid(self) -> bool:
        return not self.is_expired()


@dataclass
class AuthContext:
    """Current authenticated user plus the session it came from."""
    user: User
    session: Session
