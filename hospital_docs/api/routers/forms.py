"""Helpers for multipart form fields."""

import json
from typing import List, Optional

from hospital_docs.api.exceptions import ValidationError


def parse_json_list(value: Optional[str], field: str) -> List[str]:
    """Form fields such as tags arrive as JSON-encoded arrays."""
    if value is None or value == "":
        return []
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        raise ValidationError(f"{field} must be a JSON array")
    if not isinstance(parsed, list):
        raise ValidationError(f"{field} must be a JSON array")
    return [str(item) for item in parsed]


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("true", "1", "yes", "on")
