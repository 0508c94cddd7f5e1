"""HTTP middleware."""

from hospital_docs.api.middleware.logging import LoggingMiddleware
from hospital_docs.api.middleware.request_id import RequestIDMiddleware

__all__ = ["LoggingMiddleware", "RequestIDMiddleware"]
