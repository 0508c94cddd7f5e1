"""
User and session tables.

Separate from hospital_docs/auth/models.py (dataclasses) which are domain models.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from hospital_docs.core.database import Base


class UserORM(Base):
    """User table - hospital staff identity."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, nullable=False, unique=True)
    password = Column(Text, nullable=False)
    display_name = Column(Text, nullable=False)
    department = Column(Text, nullable=False)
    role = Column(String(32), nullable=False, index=True)
    email = Column(Text, nullable=True)
    profile_image = Column(Text, nullable=True)

    sessions = relationship("UserSessionORM", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.username} role={self.role}>"


class UserSessionORM(Base):
    """Web sessions keyed by the hash of the cookie token."""
    __tablename__ = "user_sessions"

    session_id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    last_activity = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)

    user = relationship("UserORM", back_populates="sessions")

    __table_args__ = (
        Index("idx_user_sessions_user", "user_id"),
        Index("idx_user_sessions_expires", "expires_at"),
    )
