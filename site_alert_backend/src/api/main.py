from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.config import BackendConfig, load_config
from src.api.db.store import StoreProvider
from src.api.errors import SiteAlertError
from src.api.routers import alerts, health, sites, toolbox_talks, users
from src.api.services import sites_service
from src.api.services.ids import IdGenerator
from src.api.state import get_state, init_state

openapi_tags = [
    {"name": "Health", "description": "Service health, record counts and storage diagnostics."},
    {"name": "Sites", "description": "Site registration, join codes and rosters."},
    {"name": "Users", "description": "Users and their acknowledgement state."},
    {"name": "Alerts", "description": "Site-wide alerts; one active alert per site."},
    {"name": "Toolbox Talks", "description": "Short safety messages posted to a site."},
]

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SiteAlertError)
    async def _site_alert_error(_: Request, exc: SiteAlertError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies (e.g. a non-JSON payload) share the 400 shape of missing fields.
        return JSONResponse(status_code=400, content={"error": "Invalid request", "message": str(exc.errors())})

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": str(exc) or "Something went wrong"},
        )


# PUBLIC_INTERFACE
def create_app(
    config: Optional[BackendConfig] = None,
    stores: Optional[StoreProvider] = None,
    ids: Optional[IdGenerator] = None,
) -> FastAPI:
    """Build the FastAPI app with typed state, CORS, error handlers and routers."""
    config = config or load_config()

    app = FastAPI(
        title="Site Alert API",
        description=(
            "Alerting and check-in backend for construction sites: site registration, roster joins, "
            "site-wide alerts with acknowledgement, and toolbox talks. Stores data in MongoDB when a "
            "connection string is configured, otherwise in process memory."
        ),
        version="1.0.0",
        openapi_tags=openapi_tags,
    )

    init_state(app, config, stores=stores, ids=ids)

    @app.on_event("startup")
    async def _on_startup() -> None:
        """Startup hook: seed the demo sites when enabled and no site exists."""
        state = get_state(app)
        if state.config.seed_sample_sites:
            sites_service.seed_sample_sites(state.stores.get(), state.config.company_id)

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:
        """Shutdown hook: close Mongo connections."""
        try:
            get_state(app).stores.close()
        except Exception:
            logger.exception("Error closing storage")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(sites.router)
    app.include_router(users.router)
    app.include_router(alerts.router)
    app.include_router(toolbox_talks.router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    cfg = get_state(app).config
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Site Alert backend listening on port %s (API base /api)", cfg.port)
    uvicorn.run(app, host=cfg.host, port=cfg.port, log_level=cfg.log_level.lower())
