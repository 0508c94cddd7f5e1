"""Personal storage schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.persistence.models import StorageFile


class StorageFileResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    file_path: str
    file_type: str
    file_size: int
    owner_id: int
    upload_date: datetime
    last_modified: datetime
    parent_id: Optional[int] = None
    is_folder: bool
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    access_level: str
    shared_with: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, entry: StorageFile) -> "StorageFileResponse":
        return cls(
            id=entry.id,
            name=entry.name,
            description=entry.description,
            file_path=entry.file_path,
            file_type=entry.file_type,
            file_size=entry.file_size,
            owner_id=entry.owner_id,
            upload_date=entry.upload_date,
            last_modified=entry.last_modified,
            parent_id=entry.parent_id,
            is_folder=entry.is_folder,
            is_deleted=entry.is_deleted,
            deleted_at=entry.deleted_at,
            access_level=entry.access_level,
            shared_with=entry.shared_with,
        )


class StorageUsageResponse(CamelModel):
    usage: int
    limit: int
    percentage: float
