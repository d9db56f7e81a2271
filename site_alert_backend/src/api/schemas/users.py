from __future__ import annotations

from typing import Optional

from pydantic import Field

from src.api.schemas.common import CamelModel


class UserUpsert(CamelModel):
    """Request body for creating or updating a user."""

    id: Optional[str] = Field(default=None, description="Client-chosen user id.")
    name: Optional[str] = Field(default=None)
    role: Optional[str] = Field(default=None, description="Free-form role, e.g. 'worker' or 'manager'.")
    site_id: Optional[str] = Field(default=None, alias="siteId", description="Site the user belongs to, if any.")


class UserOut(CamelModel):
    """A user and their latest acknowledgement state."""

    id: str
    name: str
    role: str
    site_id: Optional[str] = Field(default=None, alias="siteId")
    acknowledged: bool = Field(False, description="Whether the user acknowledged the latest alert.")
    needs_help: bool = Field(False, alias="needsHelp", description="Whether the user asked for help when acknowledging.")
    last_active: int = Field(..., alias="lastActive", description="Last join/upsert time, epoch milliseconds.")
