from __future__ import annotations

from typing import List, Optional

from pymongo import DESCENDING

from src.api.db.store import Store
from src.api.errors import ValidationError
from src.api.schemas.common import to_epoch_ms, utc_now
from src.api.schemas.toolbox_talks import ToolboxTalkCreate
from src.api.services._validation import clean, require
from src.api.services.ids import IdGenerator


# PUBLIC_INTERFACE
def create_toolbox_talk(store: Store, ids: IdGenerator, payload: ToolboxTalkCreate) -> dict:
    """Post a toolbox talk to a site."""
    require("Missing required fields: siteId, type, message", payload.site_id, payload.type, payload.message)
    site_id = clean(payload.site_id)
    now = utc_now()
    return store.toolbox_talks.insert(
        {
            "id": ids.toolbox_talk_id(),
            "siteId": site_id,
            "type": clean(payload.type),
            "message": clean(payload.message),
            "timestamp": to_epoch_ms(now),
            "isActive": True,
            "acknowledgedBy": [],
            # NOTE: holds the site id, not a user id.
            "createdBy": site_id,
            "createdAt": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        }
    )


# PUBLIC_INTERFACE
def list_toolbox_talks(store: Store, site_id: Optional[str]) -> List[dict]:
    """Talks of one site, newest first."""
    site_id = clean(site_id)
    if not site_id:
        raise ValidationError("Missing required parameter: siteId")
    return store.toolbox_talks.list({"siteId": site_id}, sort=("timestamp", DESCENDING))
