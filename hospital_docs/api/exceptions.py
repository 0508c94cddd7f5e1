"""Custom exceptions for API layer."""

from typing import Any, Dict, Optional


class APIError(Exception):
    """Base class for API errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"error": self.message}
        if self.details:
            result.update(self.details)
        return result


class NotFoundError(APIError):
    """Resource not found."""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            message=f"{resource_type} {resource_id} not found",
            status_code=404,
        )


class ValidationError(APIError):
    """Request validation failed."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=400, details=details)


class AuthenticationError(APIError):
    """No valid session or bad credentials."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message, status_code=401)


class PermissionDeniedError(APIError):
    """Authenticated but not allowed."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message=message, status_code=403)


class ConflictError(APIError):
    """Operation conflicts with current state."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=409, details=details)


class QuotaExceededError(ValidationError):
    """Upload would push the owner's storage over the limit."""

    def __init__(self, usage: int, limit: int):
        self.usage = usage
        self.limit = limit
        super().__init__(
            message="Storage limit exceeded",
            details={"usage": usage, "limit": limit},
        )
