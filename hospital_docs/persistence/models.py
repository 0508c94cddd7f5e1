"""Persistence domain models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CategoryType(str, Enum):
    """Download-center category kinds."""
    INTERNAL_FORM = "internal_form"
    EXTERNAL_FORM = "external_form"
    TEMPLATE = "template"


class CirculationStatus(str, Enum):
    """Circulation document status values."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


class AccessLevel(str, Enum):
    """Visibility of a personal storage entry."""
    PRIVATE = "private"
    DEPARTMENT = "department"
    PUBLIC = "public"


@dataclass
class DocumentCategory:
    name: str
    type: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class Document:
    """A downloadable form or template in the download center."""
    title: str
    file_name: str
    file_type: str
    file_path: str
    file_size: int
    description: Optional[str] = None
    category_id: Optional[int] = None
    uploaded_by: Optional[int] = None
    download_count: int = 0
    tags: List[str] = field(default_factory=list)
    access_roles: List[str] = field(default_factory=list)
    access_departments: List[str] = field(default_factory=list)
    upload_date: datetime = field(default_factory=_now)
    last_updated: datetime = field(default_factory=_now)
    id: Optional[int] = None


@dataclass
class DownloadRecord:
    document_id: int
    user_id: int
    ip_address: Optional[str] = None
    download_date: datetime = field(default_factory=_now)
    id: Optional[int] = None


@dataclass
class WorkflowStep:
    """One approval step: 1-based order, the role that acts, a label."""
    order: int
    role: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"order": self.order, "role": self.role, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowStep":
        return cls(
            order=int(data["order"]),
            role=data["role"],
            description=data.get("description", ""),
        )


@dataclass
class Workflow:
    """Named, ordered sequence of approval steps."""
    name: str
    steps: List[WorkflowStep]
    description: Optional[str] = None
    is_default: bool = False
    is_locked: bool = False
    created_by: Optional[int] = None
    created_at: datetime = field(default_factory=_now)
    id: Optional[int] = None

    def step_at(self, index: int) -> Optional[WorkflowStep]:
        """Step for a 0-based position in the ordered list, if any."""
        ordered = sorted(self.steps, key=lambda s: s.order)
        if 0 <= index < len(ordered):
            return ordered[index]
        return None


@dataclass
class CirculationDocument:
    """
    Internal memo routed through a workflow.

    current_step counts completed approvals: 0 before the first approval,
    len(workflow.steps) once fully approved.
    """
    title: str
    document_number: str
    created_by: int
    content: Optional[str] = None
    status: CirculationStatus = CirculationStatus.PENDING
    current_step: int = 0
    workflow_id: Optional[int] = None
    assigned_to: Optional[int] = None
    comments: List[Dict[str, Any]] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    file_path: Optional[str] = None
    file_type: Optional[str] = None
    created_at: datetime = field(default_factory=_now)
    id: Optional[int] = None

    def advance(self, total_steps: int, next_assignee: Optional[int]) -> None:
        """Record one approval."""
        next_step = self.current_step + 1
        self.current_step = next_step
        if next_step >= total_steps:
            self.status = CirculationStatus.APPROVED
            self.assigned_to = None
        else:
            self.status = CirculationStatus.IN_PROGRESS
            self.assigned_to = next_assignee

    def reject(self) -> None:
        """Terminate the circulation; the step position is not kept."""
        self.status = CirculationStatus.REJECTED
        self.current_step = 0
        self.assigned_to = None

    def add_comment(self, user_id: int, comment: str, status: str) -> None:
        self.comments.append({
            "userId": user_id,
            "comment": comment,
            "status": status,
            "timestamp": _now().isoformat(),
        })


@dataclass
class StorageFile:
    """File or folder in a user's personal storage."""
    name: str
    file_path: str
    file_type: str
    file_size: int
    owner_id: int
    description: Optional[str] = None
    parent_id: Optional[int] = None
    is_folder: bool = False
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    access_level: str = AccessLevel.PRIVATE.value
    shared_with: List[str] = field(default_factory=list)
    upload_date: datetime = field(default_factory=_now)
    last_modified: datetime = field(default_factory=_now)
    id: Optional[int] = None

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.deleted_at = _now()

    def restore(self) -> None:
        self.is_deleted = False
        self.deleted_at = None

    @property
    def counts_toward_quota(self) -> bool:
        return not self.is_deleted and not self.is_folder


@dataclass
class ActivityLog:
    """Append-only audit entry."""
    user_id: int
    action: str
    resource_type: str
    resource_id: int
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_now)
    id: Optional[int] = None
