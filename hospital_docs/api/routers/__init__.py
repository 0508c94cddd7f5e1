"""API routers."""

from hospital_docs.api.routers import (
    activity,
    admin,
    auth,
    circulation,
    documents,
    health,
    storage,
    users,
    workflows,
)

ALL_ROUTERS = [
    health.router,
    auth.router,
    users.router,
    documents.router,
    workflows.router,
    circulation.router,
    storage.router,
    activity.router,
    admin.router,
]

__all__ = ["ALL_ROUTERS"]
