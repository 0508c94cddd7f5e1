"""Repository protocols and in-memory implementations."""

import copy
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, Protocol, TypeVar, runtime_checkable

from hospital_docs.auth.repositories import (
    InMemorySessionRepository,
    InMemoryUserRepository,
    SessionRepository,
    UserRepository,
)
from hospital_docs.persistence.models import (
    ActivityLog,
    CirculationDocument,
    Document,
    DocumentCategory,
    DownloadRecord,
    StorageFile,
    Workflow,
)


class RecordNotFoundError(Exception):
    """Record not found in repository."""
    pass


# =============================================================================
# PROTOCOLS
# =============================================================================

@runtime_checkable
class CategoryRepository(Protocol):
    """Protocol for download-center categories."""

    async def create(self, category: DocumentCategory) -> DocumentCategory:
        ...

    async def get(self, category_id: int) -> Optional[DocumentCategory]:
        ...

    async def list_all(self) -> List[DocumentCategory]:
        ...


@runtime_checkable
class DocumentRepository(Protocol):
    """Protocol for download-center documents."""

    async def create(self, document: Document) -> Document:
        ...

    async def get(self, document_id: int) -> Optional[Document]:
        ...

    async def list_all(self) -> List[Document]:
        ...

    async def list_by_category(self, category_id: int) -> List[Document]:
        ...

    async def increment_download_count(self, document_id: int) -> Document:
        """Atomically add one to download_count. Raises RecordNotFoundError."""
        ...


@runtime_checkable
class DownloadHistoryRepository(Protocol):
    """Protocol for download history."""

    async def create(self, record: DownloadRecord) -> DownloadRecord:
        ...

    async def list_by_document(self, document_id: int) -> List[DownloadRecord]:
        ...


@runtime_checkable
class WorkflowRepository(Protocol):
    """Protocol for workflow definitions."""

    async def create(self, workflow: Workflow) -> Workflow:
        ...

    async def get(self, workflow_id: int) -> Optional[Workflow]:
        ...

    async def list_all(self) -> List[Workflow]:
        ...

    async def update(self, workflow: Workflow) -> Workflow:
        ...


@runtime_checkable
class CirculationRepository(Protocol):
    """Protocol for circulation documents."""

    async def create(self, document: CirculationDocument) -> CirculationDocument:
        ...

    async def get(self, document_id: int) -> Optional[CirculationDocument]:
        ...

    async def list_all(self) -> List[CirculationDocument]:
        ...

    async def list_for_user(self, user_id: int) -> List[CirculationDocument]:
        """Documents created by or assigned to the user."""
        ...

    async def update(self, document: CirculationDocument) -> CirculationDocument:
        ...


@runtime_checkable
class StorageFileRepository(Protocol):
    """Protocol for personal storage entries."""

    async def create(self, file: StorageFile) -> StorageFile:
        ...

    async def get(self, file_id: int) -> Optional[StorageFile]:
        ...

    async def list_children(self, owner_id: int, parent_id: Optional[int] = None) -> List[StorageFile]:
        """Non-deleted entries of an owner directly under parent_id (None = root)."""
        ...

    async def update(self, file: StorageFile) -> StorageFile:
        ...

    async def usage_bytes(self, owner_id: int) -> int:
        """Sum of sizes of non-deleted, non-folder files."""
        ...


@runtime_checkable
class ActivityLogRepository(Protocol):
    """Protocol for the append-only activity log."""

    async def append(self, entry: ActivityLog) -> ActivityLog:
        ...

    async def list_recent(self, limit: int = 10) -> List[ActivityLog]:
        """Newest first."""
        ...

    async def list_for_resource(self, resource_type: str, resource_id: int) -> List[ActivityLog]:
        """Oldest first."""
        ...


# =============================================================================
# IN-MEMORY IMPLEMENTATIONS
# =============================================================================

T = TypeVar("T")


class _InMemoryTable(Generic[T]):
    """Integer-keyed store that hands out copies, like rows fetched from a database."""

    def __init__(self):
        self._rows: Dict[int, T] = {}
        self._next_id = 1

    def _insert(self, record: T) -> T:
        stored = copy.deepcopy(record)
        stored.id = self._next_id
        self._next_id += 1
        self._rows[stored.id] = stored
        return copy.deepcopy(stored)

    def _get(self, record_id: int) -> Optional[T]:
        row = self._rows.get(record_id)
        return copy.deepcopy(row) if row is not None else None

    def _replace(self, record: T) -> T:
        if record.id not in self._rows:
            raise RecordNotFoundError(f"{type(record).__name__} {record.id} not found")
        self._rows[record.id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def _all(self) -> List[T]:
        return [copy.deepcopy(self._rows[k]) for k in sorted(self._rows)]

    def clear(self) -> None:
        """Clear all rows (for testing)."""
        self._rows.clear()
        self._next_id = 1


class InMemoryCategoryRepository(_InMemoryTable[DocumentCategory]):

    async def create(self, category: DocumentCategory) -> DocumentCategory:
        return self._insert(category)

    async def get(self, category_id: int) -> Optional[DocumentCategory]:
        return self._get(category_id)

    async def list_all(self) -> List[DocumentCategory]:
        return self._all()


class InMemoryDocumentRepository(_InMemoryTable[Document]):

    async def create(self, document: Document) -> Document:
        return self._insert(document)

    async def get(self, document_id: int) -> Optional[Document]:
        return self._get(document_id)

    async def list_all(self) -> List[Document]:
        return self._all()

    async def list_by_category(self, category_id: int) -> List[Document]:
        return [d for d in self._all() if d.category_id == category_id]

    async def increment_download_count(self, document_id: int) -> Document:
        row = self._rows.get(document_id)
        if row is None:
            raise RecordNotFoundError(f"Document {document_id} not found")
        row.download_count += 1
        return copy.deepcopy(row)


class InMemoryDownloadHistoryRepository(_InMemoryTable[DownloadRecord]):

    async def create(self, record: DownloadRecord) -> DownloadRecord:
        return self._insert(record)

    async def list_by_document(self, document_id: int) -> List[DownloadRecord]:
        return [r for r in self._all() if r.document_id == document_id]


class InMemoryWorkflowRepository(_InMemoryTable[Workflow]):

    async def create(self, workflow: Workflow) -> Workflow:
        return self._insert(workflow)

    async def get(self, workflow_id: int) -> Optional[Workflow]:
        return self._get(workflow_id)

    async def list_all(self) -> List[Workflow]:
        return self._all()

    async def update(self, workflow: Workflow) -> Workflow:
        return self._replace(workflow)


class InMemoryCirculationRepository(_InMemoryTable[CirculationDocument]):

    async def create(self, document: CirculationDocument) -> CirculationDocument:
        return self._insert(document)

    async def get(self, document_id: int) -> Optional[CirculationDocument]:
        return self._get(document_id)

    async def list_all(self) -> List[CirculationDocument]:
        return self._all()

    async def list_for_user(self, user_id: int) -> List[CirculationDocument]:
        return [
            d for d in self._all()
            if d.created_by == user_id or d.assigned_to == user_id
        ]

    async def update(self, document: CirculationDocument) -> CirculationDocument:
        return self._replace(document)


class InMemoryStorageFileRepository(_InMemoryTable[StorageFile]):

    async def create(self, file: StorageFile) -> StorageFile:
        return self._insert(file)

    async def get(self, file_id: int) -> Optional[StorageFile]:
        return self._get(file_id)

    async def list_children(self, owner_id: int, parent_id: Optional[int] = None) -> List[StorageFile]:
        return [
            f for f in self._all()
            if f.owner_id == owner_id and not f.is_deleted and f.parent_id == parent_id
        ]

    async def update(self, file: StorageFile) -> StorageFile:
        return self._replace(file)

    async def usage_bytes(self, owner_id: int) -> int:
        return sum(
            f.file_size for f in self._rows.values()
            if f.owner_id == owner_id and f.counts_toward_quota
        )


class InMemoryActivityLogRepository(_InMemoryTable[ActivityLog]):

    async def append(self, entry: ActivityLog) -> ActivityLog:
        return self._insert(entry)

    async def list_recent(self, limit: int = 10) -> List[ActivityLog]:
        logs = self._all()
        logs.sort(key=lambda log: (log.timestamp, log.id), reverse=True)
        return logs[:limit]

    async def list_for_resource(self, resource_type: str, resource_id: int) -> List[ActivityLog]:
        return [
            log for log in self._all()
            if log.resource_type == resource_type and log.resource_id == resource_id
        ]


# =============================================================================
# BUNDLE
# =============================================================================

@dataclass
class Repositories:
    """Every repository the application uses, from one backend."""
    users: UserRepository
    sessions: SessionRepository
    categories: CategoryRepository
    documents: DocumentRepository
    downloads: DownloadHistoryRepository
    workflows: WorkflowRepository
    circulation: CirculationRepository
    storage_files: StorageFileRepository
    activity_logs: ActivityLogRepository


def create_in_memory_repositories() -> Repositories:
    """Fresh, empty in-memory backend."""
    return Repositories(
        users=InMemoryUserRepository(),
        sessions=InMemorySessionRepository(),
        categories=InMemoryCategoryRepository(),
        documents=InMemoryDocumentRepository(),
        downloads=InMemoryDownloadHistoryRepository(),
        workflows=InMemoryWorkflowRepository(),
        circulation=InMemoryCirculationRepository(),
        storage_files=InMemoryStorageFileRepository(),
        activity_logs=InMemoryActivityLogRepository(),
    )
