from __future__ import annotations

from typing import Any, Optional

from src.api.errors import ValidationError


def clean(value: Any) -> str:
    """Stringify and trim an optional request value; None becomes ''."""
    if value is None:
        return ""
    return str(value).strip()


def require(message: str, *values: Optional[Any]) -> None:
    """Raise ValidationError(message) unless every value is non-empty after trimming."""
    if not all(clean(v) for v in values):
        raise ValidationError(message)
