"""Common schema types for API responses."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; either accepted on input."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class ErrorResponse(BaseModel):
    """Standard error response format. Extra keys carry error context."""

    error: str = Field(..., description="Human-readable error message")

    model_config = {"extra": "allow", "json_schema_extra": {
        "example": {"error": "Storage limit exceeded", "usage": 4718592, "limit": 5242880}
    }}


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
