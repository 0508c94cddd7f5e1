"""Workflow definition endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from hospital_docs.api.dependencies import get_workflow_service
from hospital_docs.api.schemas import (
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowUpdateRequest,
)
from hospital_docs.api.services.workflow_service import WorkflowService
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User

router = APIRouter(prefix="/api/workflows", tags=["workflows"])


@router.get("", response_model=List[WorkflowResponse])
async def list_workflows(
    _: User = Depends(require_auth),
    service: WorkflowService = Depends(get_workflow_service),
):
    return [WorkflowResponse.from_domain(w) for w in await service.list_workflows()]


@router.get("/{workflow_id}", response_model=WorkflowResponse)
async def get_workflow(
    workflow_id: int,
    _: User = Depends(require_auth),
    service: WorkflowService = Depends(get_workflow_service),
):
    return WorkflowResponse.from_domain(await service.get_workflow(workflow_id))


@router.post("", response_model=WorkflowResponse, status_code=status.HTTP_201_CREATED)
async def create_workflow(
    body: WorkflowCreateRequest,
    user: User = Depends(require_auth),
    service: WorkflowService = Depends(get_workflow_service),
):
    workflow = await service.create_workflow(
        name=body.name,
        description=body.description,
        steps=[s.to_domain() for s in body.steps],
        created_by=user.id,
        is_default=body.is_default,
        is_locked=body.is_locked,
    )
    return WorkflowResponse.from_domain(workflow)


@router.put("/{workflow_id}", response_model=WorkflowResponse)
async def update_workflow(
    workflow_id: int,
    body: WorkflowUpdateRequest,
    user: User = Depends(require_auth),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Edit name, description or steps. 409 when the workflow is locked."""
    workflow = await service.update_workflow(
        workflow_id,
        actor_id=user.id,
        name=body.name,
        description=body.description,
        steps=[s.to_domain() for s in body.steps] if body.steps is not None else None,
    )
    return WorkflowResponse.from_domain(workflow)
