"""API schema models."""

from hospital_docs.api.schemas.common import (
    CamelModel,
    ErrorResponse,
    HealthResponse,
    SuccessResponse,
)
from hospital_docs.api.schemas.users import (
    CreateUserRequest,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    UserResponse,
    UserSummary,
)
from hospital_docs.api.schemas.documents import (
    CategoryCreateRequest,
    CategoryResponse,
    DocumentResponse,
    DownloadAcknowledgement,
)
from hospital_docs.api.schemas.workflows import (
    WorkflowCreateRequest,
    WorkflowResponse,
    WorkflowStepSchema,
    WorkflowUpdateRequest,
)
from hospital_docs.api.schemas.circulation import (
    CirculationResponse,
    StatusUpdateRequest,
    TransitionRequest,
)
from hospital_docs.api.schemas.storage import StorageFileResponse, StorageUsageResponse
from hospital_docs.api.schemas.activity import ActivityLogResponse


__all__ = [
    # Common
    "CamelModel",
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    # Users
    "CreateUserRequest",
    "LoginRequest",
    "RegisterRequest",
    "RoleUpdateRequest",
    "UserResponse",
    "UserSummary",
    # Download center
    "CategoryCreateRequest",
    "CategoryResponse",
    "DocumentResponse",
    "DownloadAcknowledgement",
    # Workflows
    "WorkflowCreateRequest",
    "WorkflowResponse",
    "WorkflowStepSchema",
    "WorkflowUpdateRequest",
    # Circulation
    "CirculationResponse",
    "StatusUpdateRequest",
    "TransitionRequest",
    # Storage
    "StorageFileResponse",
    "StorageUsageResponse",
    # Activity
    "ActivityLogResponse",
]
