"""Activity log schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from hospital_docs.api.schemas.common import CamelModel
from hospital_docs.api.schemas.users import UserSummary
from hospital_docs.auth.models import User
from hospital_docs.persistence.models import ActivityLog


class ActivityLogResponse(CamelModel):
    id: int
    user_id: int
    action: str
    resource_type: str
    resource_id: int
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime
    user: Optional[UserSummary] = None

    @classmethod
    def from_domain(cls, log: ActivityLog, user: Optional[User] = None) -> "ActivityLogResponse":
        return cls(
            id=log.id,
            user_id=log.user_id,
            action=log.action,
            resource_type=log.resource_type,
            resource_id=log.resource_id,
            details=log.details,
            timestamp=log.timestamp,
            user=UserSummary.from_domain(user) if user else None,
        )
