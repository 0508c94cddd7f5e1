"""Recent activity feed."""

from typing import List

from fastapi import APIRouter, Depends, Query

from hospital_docs.api.dependencies import get_activity_service
from hospital_docs.api.schemas import ActivityLogResponse
from hospital_docs.api.services.activity_service import ActivityService
from hospital_docs.auth.dependencies import require_auth
from hospital_docs.auth.models import User

router = APIRouter(prefix="/api", tags=["activity"])


@router.get("/activity-logs", response_model=List[ActivityLogResponse])
async def recent_activity(
    limit: int = Query(10, ge=1, le=100),
    _: User = Depends(require_auth),
    service: ActivityService = Depends(get_activity_service),
):
    """Newest first, each entry with its actor when the user still exists."""
    entries = await service.recent(limit)
    return [ActivityLogResponse.from_domain(log, user) for log, user in entries]
