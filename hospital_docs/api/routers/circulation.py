"""
Circulation document endpoints.

Transitions are allowed for the document's current assignee or an admin.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from hospital_docs.api.dependencies import get_circulation_service, get_upload_service
from hospital_docs.api.routers.forms import parse_json_list
from hospital_docs.api.schemas import (
    CirculationResponse,
    StatusUpdateRequest,
    TransitionRequest,
)
from hospital_docs.api.services.circulation_service import CirculationService
from hospital_docs.api.services.upload_service import AREA_CIRCULATION, UploadService
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/circulation-documents", tags=["circulation"])


@router.get("", response_model=List[CirculationResponse])
async def list_circulation_documents(
    user_id: Optional[int] = Query(None, alias="userId"),
    _: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
):
    """All documents, or those created by or assigned to userId."""
    documents = await service.list_documents(user_id)
    return [CirculationResponse.from_domain(d) for d in documents]


@router.get("/{document_id}", response_model=CirculationResponse)
async def get_circulation_document(
    document_id: int,
    _: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
):
    return CirculationResponse.from_domain(await service.get_document(document_id))


@router.post("", response_model=CirculationResponse, status_code=status.HTTP_201_CREATED)
async def create_circulation_document(
    title: str = Form(...),
    document_number: str = Form(..., alias="documentNumber"),
    content: Optional[str] = Form(None),
    workflow_id: Optional[int] = Form(None, alias="workflowId"),
    assigned_to: Optional[int] = Form(None, alias="assignedTo"),
    tags: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
    uploads: UploadService = Depends(get_upload_service),
):
    """Multipart create; the file part is optional."""
    tag_list = parse_json_list(tags, "tags")

    saved = None
    if file is not None and file.filename:
        saved = await uploads.save(file, AREA_CIRCULATION)

    try:
        document = await service.create_document(
            title=title,
            document_number=document_number,
            content=content,
            created_by=user.id,
            workflow_id=workflow_id,
            assigned_to=assigned_to,
            tags=tag_list,
            file_path=saved.public_path if saved else None,
            file_type=saved.file_type if saved else None,
        )
    except Exception:
        if saved is not None:
            uploads.discard(saved.disk_path)
        raise
    return CirculationResponse.from_domain(document)


@router.put("/{document_id}/status", response_model=CirculationResponse)
async def update_status(
    document_id: int,
    body: StatusUpdateRequest,
    user: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
):
    await service.authorize(document_id, user)
    document = await service.set_status(
        document_id,
        actor_id=user.id,
        status=body.status,
        step=body.step,
        assigned_to=body.assigned_to,
        comment=body.comment,
    )
    return CirculationResponse.from_domain(document)


@router.post("/{document_id}/approve", response_model=CirculationResponse)
async def approve(
    document_id: int,
    body: Optional[TransitionRequest] = None,
    user: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
):
    await service.authorize(document_id, user)
    document = await service.approve(
        document_id,
        actor_id=user.id,
        comment=body.comment if body else None,
    )
    return CirculationResponse.from_domain(document)


@router.post("/{document_id}/reject", response_model=CirculationResponse)
async def reject(
    document_id: int,
    body: Optional[TransitionRequest] = None,
    user: User = Depends(require_auth),
    service: CirculationService = Depends(get_circulation_service),
):
    await service.authorize(document_id, user)
    document = await service.reject(
        document_id,
        actor_id=user.id,
        comment=body.comment if body else None,
    )
    return CirculationResponse.from_domain(document)
