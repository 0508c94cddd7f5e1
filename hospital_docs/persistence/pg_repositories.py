"""PostgreSQL repository implementations."""

from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy import select, and_, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hospital_docs.auth.models import User, Session
from hospital_docs.auth.repositories import (
    UserAlreadyExistsError,
    UserNotFoundError,
    SessionNotFoundError,
)
from hospital_docs.persistence.models import (
    ActivityLog,
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
    RecordNotFoundError,
    Repositories,
    create_in_memory_repositories,
)
from hospital_docs.api.models import (
    ActivityLogORM,
    CirculationDocumentORM,
    DocumentCategoryORM,
    DocumentORM,
    DownloadHistoryORM,
    StorageFileORM,
    UserORM,
    UserSessionORM,
    WorkflowORM,
)

SessionFactory = Callable[[], AsyncSession]


# ============================================================================
# ORM <-> domain conversion
# ============================================================================

def _orm_to_user(row: UserORM) -> User:
    return User(
        id=row.id,
        username=row.username,
        password=row.password,
        display_name=row.display_name,
        department=row.department,
        role=row.role,
        email=row.email,
        profile_image=row.profile_image,
    )


def _user_to_orm(user: User, row: Optional[UserORM] = None) -> UserORM:
    if row is None:
        row = UserORM()
    row.username = user.username
    row.password = user.password
    row.display_name = user.display_name
    row.department = user.department
    row.role = user.role
    row.email = user.email
    row.profile_image = user.profile_image
    return row


def _orm_to_session(row: UserSessionORM) -> Session:
    return Session(
        session_id=row.session_id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        created_at=row.created_at,
        expires_at=row.expires_at,
        last_activity=row.last_activity,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
    )


def _orm_to_category(row: DocumentCategoryORM) -> DocumentCategory:
    return DocumentCategory(
        id=row.id,
        name=row.name,
        description=row.description,
        type=row.type,
        parent_id=row.parent_id,
    )


def _orm_to_document(row: DocumentORM) -> Document:
    return Document(
        id=row.id,
        title=row.title,
        description=row.description,
        file_name=row.file_name,
        file_type=row.file_type,
        file_path=row.file_path,
        file_size=row.file_size,
        upload_date=row.upload_date,
        last_updated=row.last_updated,
        category_id=row.category_id,
        uploaded_by=row.uploaded_by,
        download_count=row.download_count,
        tags=list(row.tags or []),
        access_roles=list(row.access_roles or []),
        access_departments=list(row.access_departments or []),
    )


def _document_to_orm(doc: Document) -> DocumentORM:
    return DocumentORM(
        title=doc.title,
        description=doc.description,
        file_name=doc.file_name,
        file_type=doc.file_type,
        file_path=doc.file_path,
        file_size=doc.file_size,
        upload_date=doc.upload_date,
        last_updated=doc.last_updated,
        category_id=doc.category_id,
        uploaded_by=doc.uploaded_by,
        download_count=doc.download_count,
        tags=list(doc.tags),
        access_roles=list(doc.access_roles),
        access_departments=list(doc.access_departments),
    )


def _orm_to_download(row: DownloadHistoryORM) -> DownloadRecord:
    return DownloadRecord(
        id=row.id,
        document_id=row.document_id,
        user_id=row.user_id,
        download_date=row.download_date,
        ip_address=row.ip_address,
    )


def _orm_to_workflow(row: WorkflowORM) -> Workflow:
    return Workflow(
        id=row.id,
        name=row.name,
        description=row.description,
        steps=[WorkflowStep.from_dict(s) for s in (row.steps or [])],
        is_default=bool(row.is_default),
        is_locked=bool(row.is_locked),
        created_by=row.created_by,
        created_at=row.created_at,
    )


def _workflow_to_orm(workflow: Workflow, row: Optional[WorkflowORM] = None) -> WorkflowORM:
    if row is None:
        row = WorkflowORM(created_at=workflow.created_at)
    row.name = workflow.name
    row.description = workflow.description
    row.steps = [s.to_dict() for s in workflow.steps]
    row.is_default = workflow.is_default
    row.is_locked = workflow.is_locked
    row.created_by = workflow.created_by
    return row


def _orm_to_circulation(row: CirculationDocumentORM) -> CirculationDocument:
    return CirculationDocument(
        id=row.id,
        title=row.title,
        document_number=row.document_number,
        content=row.content,
        status=CirculationStatus(row.status),
        current_step=row.current_step or 0,
        workflow_id=row.workflow_id,
        created_by=row.created_by,
        created_at=row.created_at,
        file_path=row.file_path,
        file_type=row.file_type,
        assigned_to=row.assigned_to,
        comments=list(row.comments or []),
        tags=list(row.tags or []),
    )


def _circulation_to_orm(
    doc: CirculationDocument,
    row: Optional[CirculationDocumentORM] = None,
) -> CirculationDocumentORM:
    if row is None:
        row = CirculationDocumentORM(created_at=doc.created_at, created_by=doc.created_by)
    row.title = doc.title
    row.document_number = doc.document_number
    row.content = doc.content
    row.status = doc.status.value
    row.current_step = doc.current_step
    row.workflow_id = doc.workflow_id
    row.file_path = doc.file_path
    row.file_type = doc.file_type
    row.assigned_to = doc.assigned_to
    row.comments = list(doc.comments)
    row.tags = list(doc.tags)
    return row


def _orm_to_storage_file(row: StorageFileORM) -> StorageFile:
    return StorageFile(
        id=row.id,
        name=row.name,
        description=row.description,
        file_path=row.file_path,
        file_type=row.file_type,
        file_size=row.file_size,
        owner_id=row.owner_id,
        upload_date=row.upload_date,
        last_modified=row.last_modified,
        parent_id=row.parent_id,
        is_folder=bool(row.is_folder),
        is_deleted=bool(row.is_deleted),
        deleted_at=row.deleted_at,
        access_level=row.access_level,
        shared_with=list(row.shared_with or []),
    )


def _storage_file_to_orm(file: StorageFile, row: Optional[StorageFileORM] = None) -> StorageFileORM:
    if row is None:
        row = StorageFileORM(upload_date=file.upload_date, owner_id=file.owner_id)
    row.name = file.name
    row.description = file.description
    row.file_path = file.file_path
    row.file_type = file.file_type
    row.file_size = file.file_size
    row.last_modified = datetime.now(timezone.utc)
    row.parent_id = file.parent_id
    row.is_folder = file.is_folder
    row.is_deleted = file.is_deleted
    row.deleted_at = file.deleted_at
    row.access_level = file.access_level
    row.shared_with = list(file.shared_with)
    return row


def _orm_to_activity(row: ActivityLogORM) -> ActivityLog:
    return ActivityLog(
        id=row.id,
        user_id=row.user_id,
        action=row.action,
        resource_type=row.resource_type,
        resource_id=row.resource_id,
        details=row.details or {},
        timestamp=row.timestamp,
    )


# ============================================================================
# Repositories
# ============================================================================

class _PostgresRepository:
    """Holds the session factory; every call opens its own session."""

    def __init__(self, session_factory: SessionFactory):
        """
        Initialize repository.

        Args:
            session_factory: Callable that returns an AsyncSession
        """
        self._session_factory = session_factory


class PostgresUserRepository(_PostgresRepository):
    """PostgreSQL implementation of UserRepository."""

    async def create(self, user: User) -> User:
        async with self._session_factory() as session:
            row = _user_to_orm(user)
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise UserAlreadyExistsError(f"Username {user.username} already registered") from e
            await session.refresh(row)
            return _orm_to_user(row)

    async def get_by_id(self, user_id: int) -> Optional[User]:
        async with self._session_factory() as session:
            row = await session.get(UserORM, user_id)
            return _orm_to_user(row) if row else None

    async def get_by_username(self, username: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(UserORM).where(UserORM.username == username))
            row = result.scalar_one_or_none()
            return _orm_to_user(row) if row else None

    async def get_first_by_role(self, role: str) -> Optional[User]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserORM).where(UserORM.role == role).order_by(UserORM.id).limit(1)
            )
            row = result.scalar_one_or_none()
            return _orm_to_user(row) if row else None

    async def update(self, user: User) -> User:
        async with self._session_factory() as session:
            row = await session.get(UserORM, user.id)
            if row is None:
                raise UserNotFoundError(f"User {user.id} not found")
            _user_to_orm(user, row)
            await session.commit()
            return _orm_to_user(row)

    async def list_all(self) -> List[User]:
        async with self._session_factory() as session:
            result = await session.execute(select(UserORM).order_by(UserORM.id))
            return [_orm_to_user(r) for r in result.scalars().all()]


class PostgresSessionRepository(_PostgresRepository):
    """PostgreSQL implementation of SessionRepository."""

    async def create(self, sess: Session) -> Session:
        async with self._session_factory() as session:
            session.add(UserSessionORM(
                session_id=sess.session_id,
                user_id=sess.user_id,
                token_hash=sess.token_hash,
                created_at=sess.created_at,
                expires_at=sess.expires_at,
                last_activity=sess.last_activity,
                ip_address=sess.ip_address,
                user_agent=sess.user_agent,
            ))
            await session.commit()
            return sess

    async def get_by_token_hash(self, token_hash: str) -> Optional[Session]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserSessionORM).where(UserSessionORM.token_hash == token_hash)
            )
            row = result.scalar_one_or_none()
            return _orm_to_session(row) if row else None

    async def update(self, sess: Session) -> Session:
        async with self._session_factory() as session:
            result = await session.execute(
                update(UserSessionORM)
                .where(UserSessionORM.session_id == sess.session_id)
                .values(last_activity=sess.last_activity, expires_at=sess.expires_at)
            )
            await session.commit()
            if result.rowcount == 0:
                raise SessionNotFoundError(f"Session {sess.session_id} not found")
            return sess

    async def delete(self, session_id: str) -> None:
        async with self._session_factory() as session:
            await session.execute(
                delete(UserSessionORM).where(UserSessionORM.session_id == session_id)
            )
            await session.commit()

    async def delete_expired(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(UserSessionORM).where(UserSessionORM.expires_at <= datetime.now(timezone.utc))
            )
            await session.commit()
            return result.rowcount

    async def delete_by_user_id(self, user_id: int) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(UserSessionORM).where(UserSessionORM.user_id == user_id)
            )
            await session.commit()
            return result.rowcount


class PostgresCategoryRepository(_PostgresRepository):
    """PostgreSQL implementation of CategoryRepository."""

    async def create(self, category: DocumentCategory) -> DocumentCategory:
        async with self._session_factory() as session:
            row = DocumentCategoryORM(
                name=category.name,
                description=category.description,
                type=category.type,
                parent_id=category.parent_id,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_category(row)

    async def get(self, category_id: int) -> Optional[DocumentCategory]:
        async with self._session_factory() as session:
            row = await session.get(DocumentCategoryORM, category_id)
            return _orm_to_category(row) if row else None

    async def list_all(self) -> List[DocumentCategory]:
        async with self._session_factory() as session:
            result = await session.execute(select(DocumentCategoryORM).order_by(DocumentCategoryORM.id))
            return [_orm_to_category(r) for r in result.scalars().all()]


class PostgresDocumentRepository(_PostgresRepository):
    """PostgreSQL implementation of DocumentRepository."""

    async def create(self, document: Document) -> Document:
        async with self._session_factory() as session:
            row = _document_to_orm(document)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_document(row)

    async def get(self, document_id: int) -> Optional[Document]:
        async with self._session_factory() as session:
            row = await session.get(DocumentORM, document_id)
            return _orm_to_document(row) if row else None

    async def list_all(self) -> List[Document]:
        async with self._session_factory() as session:
            result = await session.execute(select(DocumentORM).order_by(DocumentORM.id))
            return [_orm_to_document(r) for r in result.scalars().all()]

    async def list_by_category(self, category_id: int) -> List[Document]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DocumentORM)
                .where(DocumentORM.category_id == category_id)
                .order_by(DocumentORM.id)
            )
            return [_orm_to_document(r) for r in result.scalars().all()]

    async def increment_download_count(self, document_id: int) -> Document:
        async with self._session_factory() as session:
            result = await session.execute(
                update(DocumentORM)
                .where(DocumentORM.id == document_id)
                .values(download_count=DocumentORM.download_count + 1)
                .returning(DocumentORM)
            )
            row = result.scalar_one_or_none()
            if row is None:
                await session.rollback()
                raise RecordNotFoundError(f"Document {document_id} not found")
            await session.commit()
            return _orm_to_document(row)


class PostgresDownloadHistoryRepository(_PostgresRepository):
    """PostgreSQL implementation of DownloadHistoryRepository."""

    async def create(self, record: DownloadRecord) -> DownloadRecord:
        async with self._session_factory() as session:
            row = DownloadHistoryORM(
                document_id=record.document_id,
                user_id=record.user_id,
                download_date=record.download_date,
                ip_address=record.ip_address,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_download(row)

    async def list_by_document(self, document_id: int) -> List[DownloadRecord]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(DownloadHistoryORM)
                .where(DownloadHistoryORM.document_id == document_id)
                .order_by(DownloadHistoryORM.id)
            )
            return [_orm_to_download(r) for r in result.scalars().all()]


class PostgresWorkflowRepository(_PostgresRepository):
    """PostgreSQL implementation of WorkflowRepository."""

    async def create(self, workflow: Workflow) -> Workflow:
        async with self._session_factory() as session:
            row = _workflow_to_orm(workflow)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_workflow(row)

    async def get(self, workflow_id: int) -> Optional[Workflow]:
        async with self._session_factory() as session:
            row = await session.get(WorkflowORM, workflow_id)
            return _orm_to_workflow(row) if row else None

    async def list_all(self) -> List[Workflow]:
        async with self._session_factory() as session:
            result = await session.execute(select(WorkflowORM).order_by(WorkflowORM.id))
            return [_orm_to_workflow(r) for r in result.scalars().all()]

    async def update(self, workflow: Workflow) -> Workflow:
        async with self._session_factory() as session:
            row = await session.get(WorkflowORM, workflow.id)
            if row is None:
                raise RecordNotFoundError(f"Workflow {workflow.id} not found")
            _workflow_to_orm(workflow, row)
            await session.commit()
            return _orm_to_workflow(row)


class PostgresCirculationRepository(_PostgresRepository):
    """PostgreSQL implementation of CirculationRepository."""

    async def create(self, document: CirculationDocument) -> CirculationDocument:
        async with self._session_factory() as session:
            row = _circulation_to_orm(document)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_circulation(row)

    async def get(self, document_id: int) -> Optional[CirculationDocument]:
        async with self._session_factory() as session:
            row = await session.get(CirculationDocumentORM, document_id)
            return _orm_to_circulation(row) if row else None

    async def list_all(self) -> List[CirculationDocument]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CirculationDocumentORM).order_by(CirculationDocumentORM.id)
            )
            return [_orm_to_circulation(r) for r in result.scalars().all()]

    async def list_for_user(self, user_id: int) -> List[CirculationDocument]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(CirculationDocumentORM)
                .where(
                    (CirculationDocumentORM.created_by == user_id)
                    | (CirculationDocumentORM.assigned_to == user_id)
                )
                .order_by(CirculationDocumentORM.id)
            )
            return [_orm_to_circulation(r) for r in result.scalars().all()]

    async def update(self, document: CirculationDocument) -> CirculationDocument:
        async with self._session_factory() as session:
            row = await session.get(CirculationDocumentORM, document.id)
            if row is None:
                raise RecordNotFoundError(f"Circulation document {document.id} not found")
            _circulation_to_orm(document, row)
            await session.commit()
            return _orm_to_circulation(row)


class PostgresStorageFileRepository(_PostgresRepository):
    """PostgreSQL implementation of StorageFileRepository."""

    async def create(self, file: StorageFile) -> StorageFile:
        async with self._session_factory() as session:
            row = _storage_file_to_orm(file)
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_storage_file(row)

    async def get(self, file_id: int) -> Optional[StorageFile]:
        async with self._session_factory() as session:
            row = await session.get(StorageFileORM, file_id)
            return _orm_to_storage_file(row) if row else None

    async def list_children(self, owner_id: int, parent_id: Optional[int] = None) -> List[StorageFile]:
        async with self._session_factory() as session:
            if parent_id is None:
                parent_clause = StorageFileORM.parent_id.is_(None)
            else:
                parent_clause = StorageFileORM.parent_id == parent_id
            result = await session.execute(
                select(StorageFileORM)
                .where(
                    and_(
                        StorageFileORM.owner_id == owner_id,
                        StorageFileORM.is_deleted == False,  # noqa: E712
                        parent_clause,
                    )
                )
                .order_by(StorageFileORM.id)
            )
            return [_orm_to_storage_file(r) for r in result.scalars().all()]

    async def update(self, file: StorageFile) -> StorageFile:
        async with self._session_factory() as session:
            row = await session.get(StorageFileORM, file.id)
            if row is None:
                raise RecordNotFoundError(f"Storage file {file.id} not found")
            _storage_file_to_orm(file, row)
            await session.commit()
            return _orm_to_storage_file(row)

    async def usage_bytes(self, owner_id: int) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                select(func.coalesce(func.sum(StorageFileORM.file_size), 0)).where(
                    and_(
                        StorageFileORM.owner_id == owner_id,
                        StorageFileORM.is_deleted == False,  # noqa: E712
                        StorageFileORM.is_folder == False,  # noqa: E712
                    )
                )
            )
            return int(result.scalar_one())


class PostgresActivityLogRepository(_PostgresRepository):
    """PostgreSQL implementation of ActivityLogRepository (insert-only)."""

    async def append(self, entry: ActivityLog) -> ActivityLog:
        async with self._session_factory() as session:
            row = ActivityLogORM(
                user_id=entry.user_id,
                action=entry.action,
                resource_type=entry.resource_type,
                resource_id=entry.resource_id,
                details=entry.details,
                timestamp=entry.timestamp,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return _orm_to_activity(row)

    async def list_recent(self, limit: int = 10) -> List[ActivityLog]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActivityLogORM)
                .order_by(ActivityLogORM.timestamp.desc(), ActivityLogORM.id.desc())
                .limit(limit)
            )
            return [_orm_to_activity(r) for r in result.scalars().all()]

    async def list_for_resource(self, resource_type: str, resource_id: int) -> List[ActivityLog]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ActivityLogORM)
                .where(
                    and_(
                        ActivityLogORM.resource_type == resource_type,
                        ActivityLogORM.resource_id == resource_id,
                    )
                )
                .order_by(ActivityLogORM.id)
            )
            return [_orm_to_activity(r) for r in result.scalars().all()]


# ============================================================================
# Factory function
# ============================================================================

def create_repositories(
    session_factory: Optional[SessionFactory] = None,
    use_postgres: bool = True,
) -> Repositories:
    """
    Create repository instances.

    Args:
        session_factory: Session factory for PostgreSQL
        use_postgres: If True, use PostgreSQL; if False, use in-memory

    Returns:
        Repositories bundle
    """
    if not use_postgres:
        return create_in_memory_repositories()

    if session_factory is None:
        raise ValueError("session_factory is required for the PostgreSQL backend")

    return Repositories(
        users=PostgresUserRepository(session_factory),
        sessions=PostgresSessionRepository(session_factory),
        categories=PostgresCategoryRepository(session_factory),
        documents=PostgresDocumentRepository(session_factory),
        downloads=PostgresDownloadHistoryRepository(session_factory),
        workflows=PostgresWorkflowRepository(session_factory),
        circulation=PostgresCirculationRepository(session_factory),
        storage_files=PostgresStorageFileRepository(session_factory),
        activity_logs=PostgresActivityLogRepository(session_factory),
    )
