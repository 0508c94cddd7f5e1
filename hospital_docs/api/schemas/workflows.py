"""Workflow definition schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.persistence.models import Workflow, WorkflowStep


class WorkflowStepSchema(CamelModel):
    order: int = Field(..., ge=1)
    role: str
    description: str

    def to_domain(self) -> WorkflowStep:
        return WorkflowStep(order=self.order, role=self.role, description=self.description)


class WorkflowCreateRequest(CamelModel):
    name: str
    description: Optional[str] = None
    steps: List[WorkflowStepSchema]
    is_default: bool = False
    is_locked: bool = False

    model_config = {"json_schema_extra": {
        "example": {
            "name": "Leave approval",
            "description": "Department head then HR",
            "steps": [
                {"order": 1, "role": "manager", "description": "Department head"},
                {"order": 2, "role": "admin", "description": "Human resources"},
            ],
        }
    }}


class WorkflowUpdateRequest(CamelModel):
    """Only the fields present are changed."""

    name: Optional[str] = None
    description: Optional[str] = None
    steps: Optional[List[WorkflowStepSchema]] = None


class WorkflowResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    steps: List[WorkflowStepSchema]
    is_default: bool
    is_locked: bool
    created_by: Optional[int] = None
    created_at: datetime

    @classmethod
    def from_domain(cls, workflow: Workflow) -> "WorkflowResponse":
        return cls(
            id=workflow.id,
            name=workflow.name,
            description=workflow.description,
            steps=[
                WorkflowStepSchema(order=s.order, role=s.role, description=s.description)
                for s in sorted(workflow.steps, key=lambda s: s.order)
            ],
            is_default=workflow.is_default,
            is_locked=workflow.is_locked,
            created_by=workflow.created_by,
            created_at=workflow.created_at,
        )
