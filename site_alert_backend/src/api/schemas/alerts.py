from __future__ import annotations

from typing import Optional

from pydantic import Field

from src.api.schemas.common import CamelModel


class AlertCreate(CamelModel):
    """Request body for raising a site-wide alert."""

    site_id: Optional[str] = Field(default=None, alias="siteId")
    type: Optional[str] = Field(default=None, description="Free-form alert category, e.g. 'fire'.")
    user_id: Optional[str] = Field(default=None, alias="userId", description="Who raised the alert.")


class AlertOut(CamelModel):
    """A raised alert. Only the newest alert of a site is active."""

    id: str
    site_id: str = Field(..., alias="siteId")
    type: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    timestamp: int = Field(..., description="Creation time, epoch milliseconds.")
    active: bool = Field(..., description="True only for the site's most recent alert.")
    date: str = Field(..., description="UTC calendar date of `timestamp` (YYYY-MM-DD).")


class AcknowledgeRequest(CamelModel):
    """Request body for acknowledging an alert."""

    user_id: Optional[str] = Field(default=None, alias="userId")
    needs_help: Optional[bool] = Field(default=None, alias="needsHelp")
