"""Workflow definition store."""

import logging
from typing import List, Optional

from hospital_docs.api.exceptions import ConflictError, NotFoundError, ValidationError
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.persistence.models import Workflow, WorkflowStep
from hospital_docs.persistence.repositories import WorkflowRepository

logger = logging.getLogger(__name__)


def validate_steps(steps: List[WorkflowStep]) -> None:
    """
    Check a step list before it is stored.

    Raises:
        ValidationError: empty list, blank role or description,
            or orders that are not 1..N
    """
    if not steps:
        raise ValidationError("Workflow must have at least one step")

    for step in steps:
        if not step.role or not step.role.strip():
            raise ValidationError(f"Step {step.order} has no role")
        if not step.description or not step.description.strip():
            raise ValidationError(f"Step {step.order} has no description")

    orders = sorted(step.order for step in steps)
    if orders != list(range(1, len(steps) + 1)):
        raise ValidationError(
            "Step orders must be contiguous starting at 1",
            details={"orders": orders},
        )


class WorkflowService:

    def __init__(self, workflow_repo: WorkflowRepository, activity: ActivityService):
        self._workflow_repo = workflow_repo
        self._activity = activity

    async def list_workflows(self) -> List[Workflow]:
        return await self._workflow_repo.list_all()

    async def get_workflow(self, workflow_id: int) -> Workflow:
        workflow = await self._workflow_repo.get(workflow_id)
        if workflow is None:
            raise NotFoundError("Workflow", workflow_id)
        return workflow

    async def create_workflow(
        self,
        name: str,
        steps: List[WorkflowStep],
        created_by: int,
        description: Optional[str] = None,
        is_default: bool = False,
        is_locked: bool = False,
    ) -> Workflow:
        if not name or not name.strip():
            raise ValidationError("Workflow name is required")
        validate_steps(steps)

        workflow = await self._workflow_repo.create(Workflow(
            name=name,
            description=description,
            steps=steps,
            is_default=is_default,
            is_locked=is_locked,
            created_by=created_by,
        ))
        await self._activity.record(
            user_id=created_by,
            action="create",
            resource_type="workflow",
            resource_id=workflow.id,
            details={"name": workflow.name},
        )
        logger.info(f"Created workflow {workflow.id} ({workflow.name}) with {len(steps)} steps")
        return workflow

    async def update_workflow(
        self,
        workflow_id: int,
        actor_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        steps: Optional[List[WorkflowStep]] = None,
    ) -> Workflow:
        """
        Edit a workflow definition.

        Raises:
            NotFoundError: unknown workflow
            ConflictError: workflow is locked
            ValidationError: invalid name or steps
        """
        workflow = await self.get_workflow(workflow_id)
        if workflow.is_locked:
            raise ConflictError(f"Workflow {workflow_id} is locked")

        if name is not None:
            if not name.strip():
                raise ValidationError("Workflow name is required")
            workflow.name = name
        if description is not None:
            workflow.description = description
        if steps is not None:
            validate_steps(steps)
            workflow.steps = steps

        updated = await self._workflow_repo.update(workflow)
        await self._activity.record(
            user_id=actor_id,
            action="update",
            resource_type="workflow",
            resource_id=workflow_id,
            details={"name": updated.name},
        )
        return updated
