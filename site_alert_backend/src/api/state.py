from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI, Request

from src.api.config import BackendConfig
from src.api.db.store import Store, StoreProvider
from src.api.services.ids import IdGenerator


@dataclass
class AppState:
    """Typed app.state container for shared singletons."""

    config: BackendConfig
    stores: StoreProvider
    ids: IdGenerator = field(default_factory=IdGenerator)


# PUBLIC_INTERFACE
def init_state(
    app: FastAPI,
    config: BackendConfig,
    stores: Optional[StoreProvider] = None,
    ids: Optional[IdGenerator] = None,
) -> AppState:
    """Initialize app.state with config, store provider and id generator."""
    state = AppState(
        config=config,
        stores=stores or StoreProvider(config),
        ids=ids or IdGenerator(),
    )
    app.state.state = state
    return state


# PUBLIC_INTERFACE
def get_state(app: FastAPI) -> AppState:
    """Fetch typed AppState from a FastAPI app."""
    return app.state.state  # type: ignore[attr-defined]


# PUBLIC_INTERFACE
def get_store(request: Request) -> Store:
    """FastAPI dependency: the active store (resolved on first use)."""
    return get_state(request.app).stores.get()


# PUBLIC_INTERFACE
def get_ids(request: Request) -> IdGenerator:
    """FastAPI dependency: the app's id generator."""
    return get_state(request.app).ids
