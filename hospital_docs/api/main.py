"""
Main FastAPI application for the hospital document backend.

Download center, circulation workflows, personal storage and activity logs.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hospital_docs import __version__
from hospital_docs.api.dependencies import get_repositories, get_settings
from hospital_docs.api.error_handlers import register_error_handlers
from hospital_docs.api.middleware import LoggingMiddleware, RequestIDMiddleware
from hospital_docs.api.routers import ALL_ROUTERS
from hospital_docs.api.schemas import ErrorResponse
from hospital_docs.api.services.seed import seed_default_data
from hospital_docs.core.config import Settings
from hospital_docs.core.database import dispose_engine, init_database
from hospital_docs.core.logging import configure_from_env

logger = logging.getLogger(__name__)


def _resolve(app: FastAPI, dependency, *args):
    """Call a dependency provider, honouring app.dependency_overrides."""
    override = app.dependency_overrides.get(dependency)
    if override is not None:
        return override()
    return dependency(*args)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = _resolve(app, get_settings)
    logger.info(f"Starting hospital document API (backend={settings.STORAGE_BACKEND})")

    if settings.use_postgres:
        try:
            await init_database()
            logger.info("Database initialized")
        except Exception as e:
            logger.error(f"Database initialization failed: {e}")
            raise

    settings.UPLOAD_ROOT.mkdir(parents=True, exist_ok=True)

    if settings.SEED_DEFAULT_DATA:
        await seed_default_data(_resolve(app, get_repositories, settings))

    logger.info(f"API documentation: http://{settings.API_HOST}:{settings.API_PORT}/docs")
    yield

    logger.info("Shutting down hospital document API")
    if settings.use_postgres:
        await dispose_engine()


def create_app(settings: Optional[Settings] = None, configure_logging: bool = True) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to serve with; the global settings when omitted
        configure_logging: Apply LOG_LEVEL / LOG_FORMAT to the root logger
    """
    if configure_logging:
        configure_from_env()

    app = FastAPI(
        title="Hospital Document Management",
        description="Document download center, circulation workflows and personal storage",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        responses={
            code: {"model": ErrorResponse}
            for code in (400, 401, 403, 404, 409, 500)
        },
        lifespan=lifespan,
    )

    if settings is not None:
        app.dependency_overrides[get_settings] = lambda: settings
    cors_origins = (settings or get_settings()).CORS_ORIGINS

    # ========================================================================
    # MIDDLEWARE (last added = first executed)
    # ========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)

    # ========================================================================
    # ROUTERS
    # ========================================================================

    for router in ALL_ROUTERS:
        app.include_router(router)

    @app.get("/")
    async def root():
        """API information."""
        return {
            "name": "Hospital Document Management API",
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
            "health": "/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    from hospital_docs.core.config import settings as run_settings

    uvicorn.run(
        "hospital_docs.api.main:app",
        host=run_settings.API_HOST,
        port=run_settings.API_PORT,
        reload=True,
    )
