"""Download center: categories, documents and downloads."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import FileResponse

from hospital_docs.api.dependencies import get_document_service, get_upload_service
from hospital_docs.api.exceptions import ValidationError
from hospital_docs.api.routers.forms import parse_json_list
from hospital_docs.api.schemas import (
    CategoryCreateRequest,
    CategoryResponse,
    DocumentResponse,
    DownloadAcknowledgement,
)
from hospital_docs.api.services.document_service import DocumentService
from hospital_docs.api.services.upload_service import AREA_DOCUMENTS, UploadService
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["documents"])


@router.get("/document-categories", response_model=List[CategoryResponse])
async def list_categories(
    _: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
):
    return [CategoryResponse.from_domain(c) for c in await service.list_categories()]


@router.post(
    "/document-categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreateRequest,
    _: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
):
    category = await service.create_category(
        name=body.name,
        type=body.type.value,
        description=body.description,
        parent_id=body.parent_id,
    )
    return CategoryResponse.from_domain(category)


@router.get("/documents", response_model=List[DocumentResponse])
async def list_documents(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    _: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
):
    documents = await service.list_documents(category_id)
    return [DocumentResponse.from_domain(d) for d in documents]


@router.get("/documents/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: int,
    _: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
):
    return DocumentResponse.from_domain(await service.get_document(document_id))


@router.post("/documents", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    title: str = Form(...),
    description: Optional[str] = Form(None),
    category_id: Optional[int] = Form(None, alias="categoryId"),
    tags: Optional[str] = Form(None),
    access_roles: Optional[str] = Form(None, alias="accessRoles"),
    access_departments: Optional[str] = Form(None, alias="accessDepartments"),
    user: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
    uploads: UploadService = Depends(get_upload_service),
):
    """Multipart upload; the file part is required."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    tag_list = parse_json_list(tags, "tags")
    role_list = parse_json_list(access_roles, "accessRoles")
    department_list = parse_json_list(access_departments, "accessDepartments")

    saved = await uploads.save(file, AREA_DOCUMENTS)
    document = await service.create_document(
        saved,
        title=title,
        uploaded_by=user.id,
        description=description,
        category_id=category_id,
        tags=tag_list,
        access_roles=role_list,
        access_departments=department_list,
    )
    return DocumentResponse.from_domain(document)


@router.get("/documents/{document_id}/download")
async def download_document(
    document_id: int,
    request: Request,
    user: User = Depends(require_auth),
    service: DocumentService = Depends(get_document_service),
):
    """
    Record the download, then stream the file.

    When the stored file is missing on disk the download is still counted
    and a JSON acknowledgement is returned instead.
    """
    document = await service.record_download(
        document_id,
        user_id=user.id,
        ip_address=request.client.host if request.client else None,
    )

    path = service.local_file(document)
    if path is not None:
        return FileResponse(path, filename=document.file_name)

    logger.warning(f"File for document {document_id} missing at {document.file_path}")
    ack = DownloadAcknowledgement(document=DocumentResponse.from_domain(document))
    return ack.model_dump(by_alias=True, mode="json")
