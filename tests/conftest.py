"""
Shared pytest fixtures for all tests.

Every test runs against the in-memory backend with its own upload
directory, so no database is needed.
"""

import asyncio
import inspect
from typing import Callable, Iterator, List, Optional

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hospital_docs.api.dependencies import get_locks, get_repositories
from hospital_docs.api.main import create_app
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.api.services.seed import seed_default_data
from hospital_docs.api.services.upload_service import UploadService
from hospital_docs.core.config import Settings
from hospital_docs.core.locks import KeyedLocks
from hospital_docs.persistence.repositories import Repositories, create_in_memory_repositories


# Seeded accounts: ids follow insertion order
ADMIN = ("admin", "admin123")          # id 1, admin
MANAGER = ("somchai", "somchai123")    # id 2, manager
STAFF = ("suda", "suda123")            # id 3, staff
OTHER_STAFF = ("chaiyos", "chaiyos123")  # id 4, staff

LEAVE_WORKFLOW_ID = 1      # 2 steps, locked
PURCHASE_WORKFLOW_ID = 2   # 3 steps


# =============================================================================
# CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path) -> Settings:
    """Isolated settings: in-memory backend, uploads under tmp_path."""
    s = Settings()
    s.STORAGE_BACKEND = "memory"
    s.UPLOAD_ROOT = tmp_path / "uploads"
    s.HTTPS_ONLY = False
    s.SEED_DEFAULT_DATA = True
    s.ASSIGNEE_RESOLUTION = "placeholder"
    s.INITIAL_ASSIGNEE_ID = 2
    s.NEXT_STEP_ASSIGNEE_ID = 1
    s.STORAGE_QUOTA_BYTES = 5 * 1024 * 1024
    s.MAX_UPLOAD_SIZE = 10 * 1024 * 1024
    s.CORS_ORIGINS = ["*"]
    return s


# =============================================================================
# REPOSITORY / SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def repos() -> Repositories:
    """Fresh, empty in-memory repositories."""
    return create_in_memory_repositories()


@pytest_asyncio.fixture
async def seeded_repos(repos) -> Repositories:
    """Repositories holding the default users, categories and workflows."""
    await seed_default_data(repos)
    return repos


@pytest.fixture
def activity(repos) -> ActivityService:
    return ActivityService(repos.activity_logs, repos.users)


@pytest.fixture
def uploads(settings) -> UploadService:
    return UploadService(
        upload_root=settings.UPLOAD_ROOT,
        max_size=settings.MAX_UPLOAD_SIZE,
        allowed_extensions=settings.ALLOWED_UPLOAD_EXTENSIONS,
    )


class InterleavingRepository:
    """
    Wraps a repository so every async call first yields to the event loop.

    The in-memory repositories never suspend, so without this two gathered
    service calls run back to back and a missing lock goes unnoticed.
    """

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        attr = getattr(self._inner, name)
        if not inspect.iscoroutinefunction(attr):
            return attr

        async def call(*args, **kwargs):
            await asyncio.sleep(0)
            return await attr(*args, **kwargs)
        return call


@pytest.fixture
def interleaving() -> Callable[[object], InterleavingRepository]:
    """Factory wrapping a repository in InterleavingRepository."""
    return InterleavingRepository


# =============================================================================
# APP / CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def app(settings, repos) -> FastAPI:
    """App wired to the in-memory repositories."""
    application = create_app(settings, configure_logging=False)
    locks = KeyedLocks()
    application.dependency_overrides[get_repositories] = lambda: repos
    application.dependency_overrides[get_locks] = lambda: locks
    return application


@pytest.fixture
def make_client(app) -> Iterator[Callable[..., TestClient]]:
    """
    Factory for clients sharing one app.

    Each client has its own cookie jar; pass credentials to log it in.
    Entering the client runs startup, which seeds the default data once.
    """
    clients: List[TestClient] = []

    def _make(
        credentials: Optional[tuple] = None,
        raise_server_exceptions: bool = True,
    ) -> TestClient:
        client = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        client.__enter__()
        clients.append(client)
        if credentials:
            username, password = credentials
            response = client.post("/api/login", json={"username": username, "password": password})
            assert response.status_code == 200, response.text
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client) -> TestClient:
    """Anonymous client."""
    return make_client()


@pytest.fixture
def admin_client(make_client) -> TestClient:
    return make_client(ADMIN)


@pytest.fixture
def manager_client(make_client) -> TestClient:
    return make_client(MANAGER)


@pytest.fixture
def staff_client(make_client) -> TestClient:
    return make_client(STAFF)
