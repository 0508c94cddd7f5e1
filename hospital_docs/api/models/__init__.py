"""SQLAlchemy ORM models."""

from hospital_docs.api.models.user import UserORM, UserSessionORM
from hospital_docs.api.models.document import (
    DocumentCategoryORM,
    DocumentORM,
    DownloadHistoryORM,
)
from hospital_docs.api.models.workflow import WorkflowORM, CirculationDocumentORM
from hospital_docs.api.models.storage_file import StorageFileORM
from hospital_docs.api.models.activity_log import ActivityLogORM

__all__ = [
    "UserORM",
    "UserSessionORM",
    "DocumentCategoryORM",
    "DocumentORM",
    "DownloadHistoryORM",
    "WorkflowORM",
    "CirculationDocumentORM",
    "StorageFileORM",
    "ActivityLogORM",
]
