from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path

from src.api.db.store import Store
from src.api.schemas.alerts import AcknowledgeRequest, AlertCreate, AlertOut
from src.api.schemas.common import ErrorResponse, SuccessResponse
from src.api.services import alerts_service
from src.api.services.ids import IdGenerator
from src.api.state import get_ids, get_store

router = APIRouter(prefix="/api/alerts", tags=["Alerts"])


@router.post(
    "",
    response_model=AlertOut,
    responses={400: {"model": ErrorResponse}},
    summary="Raise alert",
    description="Raise a site-wide alert. Any previously active alert for the site is deactivated.",
    operation_id="create_alert",
)
def create_alert(
    payload: AlertCreate,
    store: Store = Depends(get_store),
    ids: IdGenerator = Depends(get_ids),
) -> dict:
    """Raise an alert."""
    return alerts_service.create_alert(store, ids, payload)


@router.get(
    "",
    response_model=List[AlertOut],
    summary="List alerts",
    description="All alerts across sites, newest first.",
    operation_id="list_alerts",
)
def list_alerts(store: Store = Depends(get_store)) -> List[dict]:
    """List all alerts."""
    return alerts_service.list_alerts(store)


@router.post(
    "/{alert_id}/acknowledge",
    response_model=SuccessResponse,
    summary="Acknowledge alert",
    description=(
        "Mark the acknowledging user as acknowledged (and optionally needing help). "
        "Succeeds even when the user is unknown."
    ),
    operation_id="acknowledge_alert",
)
def acknowledge_alert(
    payload: Optional[AcknowledgeRequest] = Body(default=None),
    alert_id: str = Path(..., description="Alert identifier"),
    store: Store = Depends(get_store),
) -> SuccessResponse:
    """Acknowledge an alert."""
    alerts_service.acknowledge_alert(store, alert_id, payload)
    return SuccessResponse(success=True)
