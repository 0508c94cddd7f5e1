"""Personal storage endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from hospital_docs.api.dependencies import get_storage_service, get_upload_service
from hospital_docs.api.exceptions import PermissionDeniedError, ValidationError
from hospital_docs.api.routers.forms import parse_bool, parse_json_list
from hospital_docs.api.schemas import StorageFileResponse, StorageUsageResponse, SuccessResponse
from hospital_docs.api.services.storage_service import StorageService
from hospital_docs.api.services.upload_service import AREA_STORAGE, UploadService
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User

router = APIRouter(prefix="/api", tags=["storage"])


def _check_owner_view(user: User, owner_id: int) -> None:
    if owner_id != user.id and not user.is_admin:
        raise PermissionDeniedError("You may only view your own storage")


@router.get("/storage-files", response_model=List[StorageFileResponse])
async def list_storage_files(
    user_id: Optional[int] = Query(None, alias="userId"),
    parent_id: Optional[int] = Query(None, alias="parentId"),
    user: User = Depends(require_auth),
    service: StorageService = Depends(get_storage_service),
):
    """Non-deleted entries at the root or inside parentId. userId defaults to the caller."""
    owner_id = user_id if user_id is not None else user.id
    _check_owner_view(user, owner_id)
    entries = await service.list_entries(owner_id, parent_id)
    return [StorageFileResponse.from_domain(e) for e in entries]


@router.get("/storage-usage/{user_id}", response_model=StorageUsageResponse)
async def storage_usage(
    user_id: int,
    user: User = Depends(require_auth),
    service: StorageService = Depends(get_storage_service),
):
    _check_owner_view(user, user_id)
    return StorageUsageResponse(**await service.usage(user_id))


@router.post("/storage-files", response_model=StorageFileResponse, status_code=status.HTTP_201_CREATED)
async def create_storage_entry(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    parent_id: Optional[int] = Form(None, alias="parentId"),
    is_folder: Optional[str] = Form(None, alias="isFolder"),
    access_level: str = Form("private", alias="accessLevel"),
    shared_with: Optional[str] = Form(None, alias="sharedWith"),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_auth),
    service: StorageService = Depends(get_storage_service),
    uploads: UploadService = Depends(get_upload_service),
):
    """Create a folder (isFolder=true) or upload a file into the caller's quota."""
    shared = parse_json_list(shared_with, "sharedWith")

    if parse_bool(is_folder):
        entry = await service.create_folder(
            owner_id=user.id,
            name=name,
            parent_id=parent_id,
            description=description,
            access_level=access_level,
            shared_with=shared,
        )
    elif file is not None and file.filename:
        saved = await uploads.save(file, AREA_STORAGE)
        entry = await service.store_file(
            owner_id=user.id,
            saved=saved,
            name=name,
            parent_id=parent_id,
            description=description,
            access_level=access_level,
            shared_with=shared,
        )
    else:
        raise ValidationError("Neither file nor folder information provided")

    return StorageFileResponse.from_domain(entry)


@router.delete("/storage-files/{file_id}", response_model=SuccessResponse)
async def delete_storage_entry(
    file_id: int,
    user: User = Depends(require_auth),
    service: StorageService = Depends(get_storage_service),
):
    """Soft delete; only the owner may delete."""
    await service.delete_entry(file_id, user.id)
    return SuccessResponse(success=True)


@router.post("/storage-files/{file_id}/restore", response_model=StorageFileResponse)
async def restore_storage_entry(
    file_id: int,
    user: User = Depends(require_auth),
    service: StorageService = Depends(get_storage_service),
):
    return StorageFileResponse.from_domain(await service.restore_entry(file_id, user.id))
