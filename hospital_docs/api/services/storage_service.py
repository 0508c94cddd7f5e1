"""Personal storage: folders, quota-checked files, soft delete and restore."""

import logging
from typing import Any, Dict, List, Optional

from hospital_docs.api.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
    ValidationError,
)
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.api.services.upload_service import SavedUpload, UploadService
from hospital_docs.core.locks import KeyedLocks
from hospital_docs.persistence.models import AccessLevel, StorageFile
from hospital_docs.persistence.repositories import StorageFileRepository

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "storage"
FOLDER_TYPE = "folder"


def _check_access_level(access_level: str) -> str:
    try:
        return AccessLevel(access_level).value
    except ValueError:
        raise ValidationError(f"Invalid access level '{access_level}'")


class StorageService:

    def __init__(
        self,
        storage_repo: StorageFileRepository,
        activity: ActivityService,
        uploads: UploadService,
        locks: KeyedLocks,
        quota_bytes: int,
    ):
        self._storage_repo = storage_repo
        self._activity = activity
        self._uploads = uploads
        self._locks = locks
        self._quota_bytes = quota_bytes

    @property
    def quota_bytes(self) -> int:
        return self._quota_bytes

    async def list_entries(self, owner_id: int, parent_id: Optional[int] = None) -> List[StorageFile]:
        return await self._storage_repo.list_children(owner_id, parent_id)

    async def get_entry(self, file_id: int) -> StorageFile:
        entry = await self._storage_repo.get(file_id)
        if entry is None:
            raise NotFoundError("File", file_id)
        return entry

    async def usage(self, owner_id: int) -> Dict[str, Any]:
        used = await self._storage_repo.usage_bytes(owner_id)
        return {
            "usage": used,
            "limit": self._quota_bytes,
            "percentage": used / self._quota_bytes * 100 if self._quota_bytes else 0.0,
        }

    async def _check_parent(self, owner_id: int, parent_id: Optional[int]) -> None:
        if parent_id is None:
            return
        parent = await self._storage_repo.get(parent_id)
        if parent is None or parent.is_deleted or not parent.is_folder:
            raise ValidationError(f"Folder {parent_id} does not exist")
        if parent.owner_id != owner_id:
            raise PermissionDeniedError("You do not have permission to use this folder")

    async def create_folder(
        self,
        owner_id: int,
        name: str,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        access_level: str = AccessLevel.PRIVATE.value,
        shared_with: Optional[List[str]] = None,
    ) -> StorageFile:
        """Folders have size 0 and are never quota checked."""
        if not name or not name.strip():
            raise ValidationError("Folder name is required")
        await self._check_parent(owner_id, parent_id)

        folder = await self._storage_repo.create(StorageFile(
            name=name,
            description=description or "",
            file_path=f"/storage/{owner_id}/{name}",
            file_type=FOLDER_TYPE,
            file_size=0,
            owner_id=owner_id,
            parent_id=parent_id,
            is_folder=True,
            access_level=_check_access_level(access_level),
            shared_with=list(shared_with or []),
        ))
        await self._record(owner_id, "upload", folder)
        return folder

    async def store_file(
        self,
        owner_id: int,
        saved: SavedUpload,
        name: Optional[str] = None,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
        access_level: str = AccessLevel.PRIVATE.value,
        shared_with: Optional[List[str]] = None,
    ) -> StorageFile:
        """
        Persist an uploaded file if it fits in the owner's quota.

        The quota check and the insert run under the owner's lock. On any
        failure the uploaded bytes are removed from disk.

        Raises:
            QuotaExceededError: usage + size would exceed the limit
        """
        try:
            access_level = _check_access_level(access_level)
            await self._check_parent(owner_id, parent_id)

            async with self._locks.hold(owner_id):
                current = await self._storage_repo.usage_bytes(owner_id)
                if current + saved.size > self._quota_bytes:
                    logger.warning(
                        f"Quota exceeded for user {owner_id}: "
                        f"{current} + {saved.size} > {self._quota_bytes}"
                    )
                    raise QuotaExceededError(usage=current, limit=self._quota_bytes)

                entry = await self._storage_repo.create(StorageFile(
                    name=name or saved.original_name,
                    description=description or "",
                    file_path=saved.public_path,
                    file_type=saved.file_type,
                    file_size=saved.size,
                    owner_id=owner_id,
                    parent_id=parent_id,
                    is_folder=False,
                    access_level=access_level,
                    shared_with=list(shared_with or []),
                ))
        except Exception:
            self._uploads.discard(saved.disk_path)
            raise

        await self._record(owner_id, "upload", entry)
        return entry

    async def delete_entry(self, file_id: int, user_id: int) -> StorageFile:
        """Soft delete; owner only."""
        entry = await self._owned_entry(file_id, user_id, "delete")
        entry.soft_delete()
        updated = await self._storage_repo.update(entry)
        await self._record(user_id, "delete", updated)
        return updated

    async def restore_entry(self, file_id: int, user_id: int) -> StorageFile:
        """Undo a soft delete; owner only."""
        entry = await self._owned_entry(file_id, user_id, "restore")
        entry.restore()
        updated = await self._storage_repo.update(entry)
        await self._record(user_id, "restore", updated)
        return updated

    async def _owned_entry(self, file_id: int, user_id: int, verb: str) -> StorageFile:
        entry = await self.get_entry(file_id)
        if entry.owner_id != user_id:
            raise PermissionDeniedError(f"You do not have permission to {verb} this file")
        return entry

    async def _record(self, user_id: int, action: str, entry: StorageFile) -> None:
        await self._activity.record(
            user_id=user_id,
            action=action,
            resource_type=RESOURCE_TYPE,
            resource_id=entry.id,
            details={"name": entry.name, "isFolder": entry.is_folder},
        )
