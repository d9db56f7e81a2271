from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Request

from src.api.db.store import Store
from src.api.schemas.alerts import AlertOut
from src.api.schemas.common import ErrorResponse
from src.api.schemas.sites import JoinSiteRequest, JoinSiteResponse, SiteCreate, SiteOut
from src.api.schemas.users import UserOut
from src.api.services import alerts_service, sites_service
from src.api.state import get_state, get_store

router = APIRouter(prefix="/api/sites", tags=["Sites"])


@router.get(
    "",
    response_model=List[SiteOut],
    summary="List sites",
    description="Return all registered sites in creation order.",
    operation_id="list_sites",
)
def list_sites(store: Store = Depends(get_store)) -> List[dict]:
    """List all sites."""
    return sites_service.list_sites(store)


@router.post(
    "",
    response_model=SiteOut,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Create site",
    description="Register a site; a random 5-character join code is generated.",
    operation_id="create_site",
)
def create_site(request: Request, payload: SiteCreate, store: Store = Depends(get_store)) -> dict:
    """Create a site."""
    state = get_state(request.app)
    return sites_service.create_site(store, state.ids, payload, company_id=state.config.company_id)


@router.get(
    "/code/{code}",
    response_model=SiteOut,
    responses={404: {"model": ErrorResponse}},
    summary="Get site by code",
    description="Look up a site by its join code (case-insensitive).",
    operation_id="get_site_by_code",
)
def get_site_by_code(code: str = Path(..., description="Site join code"), store: Store = Depends(get_store)) -> dict:
    """Fetch a site by join code."""
    return sites_service.get_site_by_code(store, code)


@router.get(
    "/{site_id}",
    response_model=SiteOut,
    responses={404: {"model": ErrorResponse}},
    summary="Get site",
    description="Fetch a single site by ID.",
    operation_id="get_site",
)
def get_site(site_id: str = Path(..., description="Site identifier"), store: Store = Depends(get_store)) -> dict:
    """Fetch a site by id."""
    return sites_service.get_site_by_id(store, site_id)


@router.post(
    "/{site_id}/join",
    response_model=JoinSiteResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Join site",
    description="Register a user on the site roster. A user belongs to one site at a time; the last join wins.",
    operation_id="join_site",
)
def join_site(
    payload: JoinSiteRequest,
    site_id: str = Path(..., description="Site identifier"),
    store: Store = Depends(get_store),
) -> JoinSiteResponse:
    """Join a site."""
    site = sites_service.join_site(store, site_id, payload)
    return JoinSiteResponse(success=True, site=SiteOut.model_validate(site))


@router.get(
    "/{site_id}/users",
    response_model=List[UserOut],
    summary="Site roster",
    description="Users currently joined to the site.",
    operation_id="list_site_users",
)
def list_site_users(site_id: str = Path(..., description="Site identifier"), store: Store = Depends(get_store)) -> List[dict]:
    """List the site's users."""
    return sites_service.list_site_users(store, site_id)


@router.get(
    "/{site_id}/alerts",
    response_model=List[AlertOut],
    summary="Site alerts",
    description="Alerts raised for the site, newest first.",
    operation_id="list_site_alerts",
)
def list_site_alerts(site_id: str = Path(..., description="Site identifier"), store: Store = Depends(get_store)) -> List[dict]:
    """List the site's alerts."""
    return alerts_service.list_site_alerts(store, site_id)
