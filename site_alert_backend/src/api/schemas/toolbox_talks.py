from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from src.api.schemas.common import CamelModel


class ToolboxTalkCreate(CamelModel):
    """Request body for posting a toolbox talk."""

    site_id: Optional[str] = Field(default=None, alias="siteId")
    type: Optional[str] = Field(default=None, description="Free-form talk category.")
    message: Optional[str] = Field(default=None, description="Safety message text.")


class ToolboxTalkOut(CamelModel):
    """A toolbox talk posted to a site."""

    id: str = Field(..., description="Talk id, prefixed 'talk-'.")
    site_id: str = Field(..., alias="siteId")
    type: str
    message: str
    timestamp: int = Field(..., description="Creation time, epoch milliseconds.")
    is_active: bool = Field(True, alias="isActive")
    acknowledged_by: List[str] = Field(default_factory=list, alias="acknowledgedBy")
    created_by: str = Field(..., alias="createdBy", description="Set to the talk's siteId.")
    created_at: str = Field(..., alias="createdAt", description="Creation time, ISO-8601 string.")


class ToolboxTalkCreated(ToolboxTalkOut):
    """Creation response: the talk fields, with `message` carrying the confirmation text."""

    success: bool = True
