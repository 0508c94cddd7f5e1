"""Download center schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.persistence.models import CategoryType, Document, DocumentCategory


class CategoryCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    type: CategoryType
    description: Optional[str] = None
    parent_id: Optional[int] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    type: str
    description: Optional[str] = None
    parent_id: Optional[int] = None

    @classmethod
    def from_domain(cls, category: DocumentCategory) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            type=category.type,
            description=category.description,
            parent_id=category.parent_id,
        )


class DocumentResponse(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    file_name: str
    file_type: str
    file_path: str
    file_size: int
    upload_date: datetime
    last_updated: datetime
    category_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    download_count: int = 0
    tags: List[str] = Field(default_factory=list)
    access_roles: List[str] = Field(default_factory=list)
    access_departments: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            title=document.title,
            description=document.description,
            file_name=document.file_name,
            file_type=document.file_type,
            file_path=document.file_path,
            file_size=document.file_size,
            upload_date=document.upload_date,
            last_updated=document.last_updated,
            category_id=document.category_id,
            uploaded_by=document.uploaded_by,
            download_count=document.download_count,
            tags=document.tags,
            access_roles=document.access_roles,
            access_departments=document.access_departments,
        )


class DownloadAcknowledgement(CamelModel):
    """Returned when the download was recorded but no file is on disk."""

    success: bool = True
    message: str = "Document download recorded"
    document: DocumentResponse
