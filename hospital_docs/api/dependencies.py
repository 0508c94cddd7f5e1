"""FastAPI dependency injection for API endpoints."""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends

from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.api.services.circulation_service import AssigneeResolver, CirculationService
from hospital_docs.api.services.document_service import DocumentService
from hospital_docs.api.services.storage_service import StorageService
from hospital_docs.api.services.upload_service import UploadService
from hospital_docs.api.services.workflow_service import WorkflowService
from hospital_docs.auth.services import SessionService, UserService
from hospital_docs.core.config import Settings, settings as global_settings
from hospital_docs.core.database import get_session_factory
from hospital_docs.core.locks import KeyedLocks
from hospital_docs.persistence.pg_repositories import create_repositories
from hospital_docs.persistence.repositories import Repositories


def get_settings() -> Settings:
    """Application settings."""
    return global_settings


@lru_cache
def repositories_for_backend(use_postgres: bool) -> Repositories:
    """One repository bundle per backend for the life of the process."""
    if use_postgres:
        return create_repositories(get_session_factory(), use_postgres=True)
    return create_repositories(use_postgres=False)


def get_repositories(settings: Settings = Depends(get_settings)) -> Repositories:
    """Repository bundle for the backend the app's settings name."""
    return repositories_for_backend(settings.use_postgres)


@lru_cache
def get_locks() -> KeyedLocks:
    """Process-wide lock registry shared by the transition handler and quota check."""
    return KeyedLocks()


def get_activity_service(repos: Repositories = Depends(get_repositories)) -> ActivityService:
    return ActivityService(repos.activity_logs, repos.users)


def get_upload_service(settings: Settings = Depends(get_settings)) -> UploadService:
    return UploadService(
        upload_root=settings.UPLOAD_ROOT,
        max_size=settings.MAX_UPLOAD_SIZE,
        allowed_extensions=settings.ALLOWED_UPLOAD_EXTENSIONS,
    )


def get_user_service(repos: Repositories = Depends(get_repositories)) -> UserService:
    return UserService(repos.users)


def get_session_service(
    repos: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
) -> SessionService:
    return SessionService(
        repos.sessions,
        repos.users,
        session_duration=timedelta(hours=settings.SESSION_DURATION_HOURS),
    )


def get_workflow_service(
    repos: Repositories = Depends(get_repositories),
    activity: ActivityService = Depends(get_activity_service),
) -> WorkflowService:
    return WorkflowService(repos.workflows, activity)


def get_circulation_service(
    repos: Repositories = Depends(get_repositories),
    activity: ActivityService = Depends(get_activity_service),
    settings: Settings = Depends(get_settings),
    locks: KeyedLocks = Depends(get_locks),
) -> CirculationService:
    resolver = AssigneeResolver(
        repos.users,
        mode=settings.ASSIGNEE_RESOLUTION,
        initial_assignee_id=settings.INITIAL_ASSIGNEE_ID,
        next_step_assignee_id=settings.NEXT_STEP_ASSIGNEE_ID,
    )
    return CirculationService(repos.circulation, repos.workflows, activity, resolver, locks)


def get_storage_service(
    repos: Repositories = Depends(get_repositories),
    activity: ActivityService = Depends(get_activity_service),
    uploads: UploadService = Depends(get_upload_service),
    locks: KeyedLocks = Depends(get_locks),
    settings: Settings = Depends(get_settings),
) -> StorageService:
    return StorageService(
        repos.storage_files,
        activity,
        uploads,
        locks,
        quota_bytes=settings.STORAGE_QUOTA_BYTES,
    )


def get_document_service(
    repos: Repositories = Depends(get_repositories),
    activity: ActivityService = Depends(get_activity_service),
    uploads: UploadService = Depends(get_upload_service),
) -> DocumentService:
    return DocumentService(
        repos.categories,
        repos.documents,
        repos.downloads,
        activity,
        uploads,
    )
