from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base for wire models: camelCase aliases, populated by either name; numbers accepted for strings."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: str = Field(..., description="Human-readable error summary.")
    message: Optional[str] = Field(default=None, description="Optional underlying error message.")


class SuccessResponse(BaseModel):
    """Plain success acknowledgement."""

    success: bool = Field(True, description="Always true on success.")


class HealthResponse(CamelModel):
    """Liveness plus per-collection record counts."""

    status: str = Field(..., description="High-level health status string (e.g., 'ok').")
    timestamp: int = Field(..., description="Epoch milliseconds at time of response.")
    storage: str = Field(..., description="Active storage backend: 'memory' or 'mongo'.")
    sites: int = Field(..., ge=0)
    users: int = Field(..., ge=0)
    alerts: int = Field(..., ge=0)
    toolbox_talks: int = Field(..., ge=0, alias="toolboxTalks")


class StorageDiagnosticsResponse(CamelModel):
    """Which backend is active and where its connection string came from."""

    backend: str = Field(..., description="Active storage backend: 'memory' or 'mongo'.")
    mongo_uri_source: str = Field(..., alias="mongoUriSource", description="Env var that provided the URI, or 'unset'.")
    mongo_uri_sanitized: Optional[str] = Field(
        default=None, alias="mongoUriSanitized", description="Configured URI with credentials masked."
    )
    timestamp: str = Field(..., description="UTC timestamp when the check was performed (ISO string).")


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def to_epoch_ms(dt: datetime) -> int:
    """Convert an aware datetime to epoch milliseconds."""
    return int(dt.timestamp() * 1000)
