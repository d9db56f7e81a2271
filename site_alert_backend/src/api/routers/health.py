from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from src.api.config import sanitize_mongo_uri
from src.api.db.store import Store
from src.api.schemas.common import HealthResponse, StorageDiagnosticsResponse, to_epoch_ms, utc_now
from src.api.schemas.sites import SeedSamplesResponse
from src.api.services import sites_service
from src.api.state import get_state, get_store

router = APIRouter(prefix="/api", tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Liveness check with per-collection record counts.",
    operation_id="health_check",
)
def health_check(store: Store = Depends(get_store)) -> HealthResponse:
    """Return service liveness status and counts."""
    return HealthResponse(
        status="ok",
        timestamp=to_epoch_ms(utc_now()),
        storage=store.backend,
        sites=store.sites.count(),
        users=store.users.count(),
        alerts=store.alerts.count(),
        toolboxTalks=store.toolbox_talks.count(),
    )


@router.get(
    "/health/storage",
    response_model=StorageDiagnosticsResponse,
    summary="Storage diagnostics",
    description="Reports the active backend and which env var provided the Mongo URI. Credentials are masked.",
    operation_id="storage_diagnostics",
)
def storage_diagnostics(request: Request, store: Store = Depends(get_store)) -> StorageDiagnosticsResponse:
    """Return storage backend diagnostics."""
    cfg = get_state(request.app).config
    return StorageDiagnosticsResponse(
        backend=store.backend,
        mongoUriSource=cfg.mongo_uri_source,
        mongoUriSanitized=sanitize_mongo_uri(cfg.mongo_uri) if cfg.mongo_uri else None,
        timestamp=utc_now().isoformat(),
    )


@router.post(
    "/init-samples",
    response_model=SeedSamplesResponse,
    tags=["Sites"],
    summary="Seed sample sites",
    description="Insert the demo sites (TEST1, DEMO2, SAMP3) unless sites already exist.",
    operation_id="init_samples",
)
def init_samples(request: Request, store: Store = Depends(get_store)) -> SeedSamplesResponse:
    """Seed demo sites once."""
    seeded = sites_service.seed_sample_sites(store, get_state(request.app).config.company_id)
    message = "Sample sites initialized" if seeded else "Sample sites already initialized"
    return SeedSamplesResponse(success=True, message=message, sites=store.sites.count())
