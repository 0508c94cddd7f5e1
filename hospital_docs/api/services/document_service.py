"""Download center: categories, documents and download tracking."""

import logging
from typing import List, Optional

from hospital_docs.api.exceptions import NotFoundError, ValidationError
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.api.services.upload_service import SavedUpload, UploadService
from hospital_docs.persistence.models import CategoryType, Document, DocumentCategory, DownloadRecord
from hospital_docs.persistence.repositories import (
    CategoryRepository,
    DocumentRepository,
    DownloadHistoryRepository,
)

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "document"


class DocumentService:

    def __init__(
        self,
        category_repo: CategoryRepository,
        document_repo: DocumentRepository,
        download_repo: DownloadHistoryRepository,
        activity: ActivityService,
        uploads: UploadService,
    ):
        self._category_repo = category_repo
        self._document_repo = document_repo
        self._download_repo = download_repo
        self._activity = activity
        self._uploads = uploads

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> List[DocumentCategory]:
        return await self._category_repo.list_all()

    async def create_category(
        self,
        name: str,
        type: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> DocumentCategory:
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        try:
            category_type = CategoryType(type).value
        except ValueError:
            allowed = ", ".join(t.value for t in CategoryType)
            raise ValidationError(f"Invalid category type '{type}', expected one of: {allowed}")
        if parent_id is not None and await self._category_repo.get(parent_id) is None:
            raise ValidationError(f"Parent category {parent_id} does not exist")

        return await self._category_repo.create(DocumentCategory(
            name=name,
            type=category_type,
            description=description,
            parent_id=parent_id,
        ))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def list_documents(self, category_id: Optional[int] = None) -> List[Document]:
        if category_id is None:
            return await self._document_repo.list_all()
        return await self._document_repo.list_by_category(category_id)

    async def get_document(self, document_id: int) -> Document:
        document = await self._document_repo.get(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        return document

    async def create_document(
        self,
        saved: SavedUpload,
        title: str,
        uploaded_by: int,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        tags: Optional[List[str]] = None,
        access_roles: Optional[List[str]] = None,
        access_departments: Optional[List[str]] = None,
    ) -> Document:
        """Register an uploaded file; the file is removed again if this fails."""
        try:
            if not title or not title.strip():
                raise ValidationError("Title is required")
            if category_id is not None and await self._category_repo.get(category_id) is None:
                raise ValidationError(f"Category {category_id} does not exist")

            document = await self._document_repo.create(Document(
                title=title,
                description=description,
                file_name=saved.stored_name,
                file_type=saved.file_type,
                file_path=saved.public_path,
                file_size=saved.size,
                category_id=category_id,
                uploaded_by=uploaded_by,
                tags=list(tags or []),
                access_roles=list(access_roles or []),
                access_departments=list(access_departments or []),
            ))
        except Exception:
            self._uploads.discard(saved.disk_path)
            raise

        await self._activity.record(
            user_id=uploaded_by,
            action="upload",
            resource_type=RESOURCE_TYPE,
            resource_id=document.id,
            details={"title": document.title, "fileName": document.file_name},
        )
        return document

    async def record_download(
        self,
        document_id: int,
        user_id: int,
        ip_address: Optional[str] = None,
    ) -> Document:
        """Count a download, keep its history row and log it."""
        document = await self.get_document(document_id)
        document = await self._document_repo.increment_download_count(document_id)
        await self._download_repo.create(DownloadRecord(
            document_id=document_id,
            user_id=user_id,
            ip_address=ip_address,
        ))
        await self._activity.record(
            user_id=user_id,
            action="download",
            resource_type=RESOURCE_TYPE,
            resource_id=document_id,
            details={"title": document.title, "fileName": document.file_name},
        )
        return document

    def local_file(self, document: Document):
        """Path on disk for a document, or None when the file is missing."""
        path = self._uploads.resolve_public_path(document.file_path)
        return path if path.is_file() else None
