"""Tests for session management."""

from datetime import timedelta

import pytest
import pytest_asyncio

from hospital_docs.auth import (
    InMemorySessionRepository,
    InMemoryUserRepository,
    Session,
    SessionService,
    User,
    utcnow,
)
from hospital_docs.auth.utils import hash_token


@pytest.fixture
def user_repo():
    """Create fresh user repository."""
    return InMemoryUserRepository()


@pytest.fixture
def session_repo():
    """Create fresh session repository."""
    return InMemorySessionRepository()


@pytest.fixture
def session_service(session_repo, user_repo):
    """Create session service with 1 hour duration for testing."""
    return SessionService(
        session_repo=session_repo,
        user_repo=user_repo,
        session_duration=timedelta(hours=1),
    )


@pytest_asyncio.fixture
async def sample_user(user_repo):
    """Create and store sample user."""
    return await user_repo.create(User(
        username="suda",
        password="unused",
        display_name="Suda",
        department="Accounting",
    ))


class TestSessionModel:
    """Tests for Session model."""

    def test_session_is_expired(self):
        now = utcnow()
        session = Session(
            session_id="sess_1", user_id=1, token_hash="h",
            created_at=now - timedelta(hours=2),
            expires_at=now - timedelta(hours=1),
            last_activity=now - timedelta(hours=2),
        )
        assert session.is_expired() is True
        assert session.is_valid() is False

    def test_session_is_valid(self):
        now = utcnow()
        session = Session(
            session_id="sess_1", user_id=1, token_hash="h",
            created_at=now, expires_at=now + timedelta(hours=1), last_activity=now,
        )
        assert session.is_valid() is True


class TestSessionService:
    """Tests for SessionService."""

    @pytest.mark.asyncio
    async def test_create_session_stores_hash_only(self, session_service, session_repo, sample_user):
        token, session = await session_service.create_session(sample_user, ip_address="10.0.0.1")

        assert session.token_hash == hash_token(token)
        assert session.token_hash != token
        assert session.session_id.startswith("sess_")
        stored = await session_repo.get_by_token_hash(hash_token(token))
        assert stored.user_id == sample_user.id

    @pytest.mark.asyncio
    async def test_session_expires_after_duration(self, session_service, sample_user):
        _, session = await session_service.create_session(sample_user)
        assert session.expires_at - session.created_at == timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_validate_session_returns_user(self, session_service, sample_user):
        token, _ = await session_service.create_session(sample_user)

        result = await session_service.validate_session(token)

        assert result is not None
        user, session = result
        assert user.id == sample_user.id

    @pytest.mark.asyncio
    async def test_validate_unknown_token(self, session_service):
        assert await session_service.validate_session("nope") is None

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, session_service, session_repo, sample_user):
        token, session = await session_service.create_session(sample_user)
        session.expires_at = utcnow() - timedelta(seconds=1)
        await session_repo.update(session)

        assert await session_service.validate_session(token) is None
        assert await session_repo.get_by_token_hash(hash_token(token)) is None

    @pytest.mark.asyncio
    async def test_invalidate_session(self, session_service, sample_user):
        token, _ = await session_service.create_session(sample_user)

        assert await session_service.invalidate_session(token) is True
        assert await session_service.validate_session(token) is None
        assert await session_service.invalidate_session(token) is False

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, session_service, session_repo, sample_user):
        _, expired = await session_service.create_session(sample_user)
        expired.expires_at = utcnow() - timedelta(seconds=1)
        await session_repo.update(expired)
        await session_service.create_session(sample_user)

        assert await session_service.cleanup_expired() == 1
