from __future__ import annotations

from typing import Optional

from pydantic import Field

from src.api.schemas.common import CamelModel


class SiteCreate(CamelModel):
    """Request body for registering a site. Presence is checked by the service."""

    name: Optional[str] = Field(default=None, description="Display name; trimmed, must not be empty.")
    manager_id: Optional[str] = Field(default=None, alias="managerId", description="Id of the creating manager.")


class SiteOut(CamelModel):
    """A registered site."""

    id: str = Field(..., description="Opaque unique site id.")
    name: str = Field(..., description="Site display name.")
    site_code: str = Field(..., alias="siteCode", description="5-character uppercase join code.")
    created_at: int = Field(..., alias="createdAt", description="Creation time, epoch milliseconds.")
    manager_id: str = Field(..., alias="managerId", description="Id of the creating manager.")
    company_id: str = Field(..., alias="companyId", description="Company identifier (constant).")


class JoinSiteRequest(CamelModel):
    """Request body for joining a site."""

    user_id: Optional[str] = Field(default=None, alias="userId")
    user_name: Optional[str] = Field(default=None, alias="userName")
    role: Optional[str] = Field(default=None, description="Free-form role, e.g. 'worker' or 'manager'.")


class JoinSiteResponse(CamelModel):
    """Join confirmation carrying the joined site."""

    success: bool = True
    site: SiteOut


class SeedSamplesResponse(CamelModel):
    """Result of seeding the demo sites."""

    success: bool = True
    message: str
    sites: int = Field(..., ge=0, description="Number of sites after seeding.")
