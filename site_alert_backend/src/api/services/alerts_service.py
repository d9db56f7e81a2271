from __future__ import annotations

import logging
from typing import List, Optional

from pymongo import DESCENDING

from src.api.db.store import Store
from src.api.schemas.alerts import AcknowledgeRequest, AlertCreate
from src.api.schemas.common import to_epoch_ms, utc_now
from src.api.services._validation import clean, require
from src.api.services.ids import IdGenerator

logger = logging.getLogger(__name__)

NEWEST_FIRST = ("timestamp", DESCENDING)


# PUBLIC_INTERFACE
def create_alert(store: Store, ids: IdGenerator, payload: AlertCreate) -> dict:
    """
    Raise a new active alert for a site, superseding the site's previous active alert.

    The memory backend runs deactivation and insert under one lock. MongoDB runs
    them as two operations with no transaction around them.
    """
    require("siteId, type, and userId are required", payload.site_id, payload.type, payload.user_id)
    site_id = clean(payload.site_id)

    now = utc_now()
    superseded, alert = store.alerts.supersede_and_insert(
        {"siteId": site_id, "active": True},
        {"active": False},
        {
            "id": ids.new_id(),
            "siteId": site_id,
            "type": clean(payload.type),
            "userId": clean(payload.user_id),
            "timestamp": to_epoch_ms(now),
            "active": True,
            "date": now.date().isoformat(),
        },
    )
    if superseded:
        logger.info("Superseded %d active alert(s) for site %s", superseded, site_id)
    return alert


# PUBLIC_INTERFACE
def list_alerts(store: Store) -> List[dict]:
    """All alerts, newest first."""
    return store.alerts.list(sort=NEWEST_FIRST)


# PUBLIC_INTERFACE
def list_site_alerts(store: Store, site_id: str) -> List[dict]:
    """Alerts of one site, newest first."""
    return store.alerts.list({"siteId": site_id}, sort=NEWEST_FIRST)


# PUBLIC_INTERFACE
def acknowledge_alert(store: Store, alert_id: str, payload: Optional[AcknowledgeRequest]) -> None:
    """
    Record an acknowledgement on the acknowledging user.

    The flag lives on the user record, not on the alert; `alert_id` is not read.
    An unknown user, or a missing body, is a silent no-op and no user record is created.
    """
    if payload is None:
        return
    user_id = clean(payload.user_id)
    if not user_id:
        return
    updated = store.users.update(
        user_id,
        {"acknowledged": True, "needsHelp": bool(payload.needs_help)},
        upsert=False,
    )
    if updated is None:
        logger.debug("Acknowledgement of alert %s by unknown user %s ignored", alert_id, user_id)
