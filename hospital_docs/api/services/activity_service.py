"""Activity log recording and the enriched recent-activity feed."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from hospital_docs.auth.models import User
from hospital_docs.auth.repositories import UserRepository
from hospital_docs.persistence.models import ActivityLog
from hospital_docs.persistence.repositories import ActivityLogRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Writes audit entries and reads them back with their actors."""

    def __init__(self, activity_repo: ActivityLogRepository, user_repo: UserRepository):
        self._activity_repo = activity_repo
        self._user_repo = user_repo

    async def record(
        self,
        user_id: int,
        action: str,
        resource_type: str,
        resource_id: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> ActivityLog:
        entry = await self._activity_repo.append(ActivityLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or {},
        ))
        logger.info(
            f"Activity {action} on {resource_type}:{resource_id} by user {user_id}"
        )
        return entry

    async def recent(self, limit: int = 10) -> List[Tuple[ActivityLog, Optional[User]]]:
        """
        Most recent entries first, each paired with its actor.

        The actor is None when the user no longer exists.
        """
        logs = await self._activity_repo.list_recent(limit)
        users: Dict[int, Optional[User]] = {}
        enriched = []
        for log in logs:
            if log.user_id not in users:
                users[log.user_id] = await self._user_repo.get_by_id(log.user_id)
            enriched.append((log, users[log.user_id]))
        return enriched
