"""
Health check endpoints.

/health is a liveness check; /health/ready also checks the database.
"""
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy import text

from hospital_docs import __version__
from hospital_docs.api.dependencies import get_settings
from hospital_docs.api.schemas import HealthResponse
from hospital_docs.core.config import Settings
from hospital_docs.core.database import get_session_factory

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def liveness_check():
    """Confirms the app is running. Does NOT check the database."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/health/ready", status_code=status.HTTP_200_OK)
async def readiness_check(response: Response, settings: Settings = Depends(get_settings)):
    """Confirms the app AND its storage backend are ready."""
    if not settings.use_postgres:
        return {"status": "ready", "database": "memory"}

    try:
        async with get_session_factory()() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()
        return {"status": "ready", "database": "connected"}
    except Exception as e:
        logger.error(f"Readiness check failed: {e}", exc_info=True)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "database": "disconnected",
            "error": str(e),
        }
