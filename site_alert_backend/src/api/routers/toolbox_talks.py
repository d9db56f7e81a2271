from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.api.db.store import Store
from src.api.schemas.common import ErrorResponse
from src.api.schemas.toolbox_talks import ToolboxTalkCreate, ToolboxTalkCreated, ToolboxTalkOut
from src.api.services import toolbox_talks_service
from src.api.services.ids import IdGenerator
from src.api.state import get_ids, get_store

router = APIRouter(prefix="/api/toolbox-talks", tags=["Toolbox Talks"])

CREATED_MESSAGE = "Toolbox talk created"


@router.get(
    "",
    response_model=List[ToolboxTalkOut],
    responses={400: {"model": ErrorResponse}},
    summary="List toolbox talks",
    description="Toolbox talks of one site, newest first. siteId is required.",
    operation_id="list_toolbox_talks",
)
def list_toolbox_talks(
    site_id: Optional[str] = Query(default=None, alias="siteId", description="Site identifier."),
    store: Store = Depends(get_store),
) -> List[dict]:
    """List a site's toolbox talks."""
    return toolbox_talks_service.list_toolbox_talks(store, site_id)


@router.post(
    "",
    response_model=ToolboxTalkCreated,
    responses={400: {"model": ErrorResponse}},
    summary="Create toolbox talk",
    description="Post a toolbox talk. The response's `message` is a confirmation string.",
    operation_id="create_toolbox_talk",
)
def create_toolbox_talk(
    payload: ToolboxTalkCreate,
    store: Store = Depends(get_store),
    ids: IdGenerator = Depends(get_ids),
) -> dict:
    """Create a toolbox talk."""
    talk = toolbox_talks_service.create_toolbox_talk(store, ids, payload)
    return {**talk, "success": True, "message": CREATED_MESSAGE}
