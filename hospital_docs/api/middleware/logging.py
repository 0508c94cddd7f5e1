"""
Request/response logging middleware.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path and client on the way in, status and duration on
    the way out. Adds an X-Process-Time header.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client = request.client.host if request.client else "unknown"
        request_id = getattr(request.state, "request_id", None)

        logger.info(
            f"Request: {request.method} {request.url.path} from {client}",
            extra={"request_id": request_id},
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Error processing request: {request.method} {request.url.path} "
                f"({duration_ms:.2f}ms): {e}",
                exc_info=True,
                extra={"request_id": request_id},
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Response: {response.status_code} ({duration_ms:.2f}ms) "
            f"for {request.method} {request.url.path}",
            extra={"request_id": request_id},
        )
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"
        return response
