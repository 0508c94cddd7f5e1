"""Persistence module: domain records, repository protocols, backends."""

from hospital_docs.persistence.models import (
    AccessLevel,
    ActivityLog,
    CategoryType,
    CirculationDocument,
    CirculationStatus,
    Document,
    DocumentCategory,
    DownloadRecord,
    StorageFile,
    Workflow,
    WorkflowStep,
)
from hospital_docs.persistence.repositories import (
    ActivityLogRepository,
    CategoryRepository,
    CirculationRepository,
    DocumentRepository,
    DownloadHistoryRepository,
    RecordNotFoundError,
    Repositories,
    StorageFileRepository,
    WorkflowRepository,
    create_in_memory_repositories,
)

__all__ = [
    # Models
    "AccessLevel",
    "ActivityLog",
    "CategoryType",
    "CirculationDocument",
    "CirculationStatus",
    "Document",
    "DocumentCategory",
    "DownloadRecord",
    "StorageFile",
    "Workflow",
    "WorkflowStep",
    # Protocols
    "ActivityLogRepository",
    "CategoryRepository",
    "CirculationRepository",
    "DocumentRepository",
    "DownloadHistoryRepository",
    "StorageFileRepository",
    "WorkflowRepository",
    # Bundle
    "Repositories",
    "create_in_memory_repositories",
    # Exceptions
    "RecordNotFoundError",
]
