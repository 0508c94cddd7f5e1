"""Circulation document schemas."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.persistence.models import CirculationDocument


class StatusUpdateRequest(CamelModel):
    """Raw status write."""

    status: str
    step: int
    assigned_to: Optional[int] = None
    comment: Optional[str] = None


class TransitionRequest(CamelModel):
    """Body for approve and reject."""

    comment: Optional[str] = None


class CirculationResponse(CamelModel):
    id: int
    title: str
    document_number: str
    content: Optional[str] = None
    status: str
    current_step: int
    workflow_id: Optional[int] = None
    created_by: int
    created_at: datetime
    file_path: Optional[str] = None
    file_type: Optional[str] = None
    assigned_to: Optional[int] = None
    comments: List[Dict[str, Any]] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, document: CirculationDocument) -> "CirculationResponse":
        return cls(
            id=document.id,
            title=document.title,
            document_number=document.document_number,
            content=document.content,
            status=document.status.value,
            current_step=document.current_step,
            workflow_id=document.workflow_id,
            created_by=document.created_by,
            created_at=document.created_at,
            file_path=document.file_path,
            file_type=document.file_type,
            assigned_to=document.assigned_to,
            comments=document.comments,
            tags=document.tags,
        )
