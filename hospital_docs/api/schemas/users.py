"""User and authentication schemas."""

from typing import Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.auth.models import User, UserRole


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    """Self-registration. New accounts are always staff."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=6)
    display_name: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    email: Optional[str] = None
    profile_image: Optional[str] = None


class CreateUserRequest(RegisterRequest):
    """Admin-created account with an explicit role."""

    role: UserRole = UserRole.STAFF


class RoleUpdateRequest(CamelModel):
    role: UserRole


class UserResponse(CamelModel):
    """Public view of a user; the password hash is never included."""

    id: int
    username: str
    display_name: str
    department: str
    role: str
    email: Optional[str] = None
    profile_image: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            display_name=user.display_name,
            department=user.department,
            role=user.role,
            email=user.email,
            profile_image=user.profile_image,
        )


class UserSummary(CamelModel):
    """Actor attached to activity entries."""

    id: int
    display_name: str
    department: str
    profile_image: Optional[str] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            display_name=user.display_name,
            department=user.department,
            profile_image=user.profile_image,
        )
