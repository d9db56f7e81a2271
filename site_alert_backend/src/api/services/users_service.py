from __future__ import annotations

from typing import List

from src.api.db.store import Store
from src.api.errors import NotFound
from src.api.schemas.common import to_epoch_ms, utc_now
from src.api.schemas.users import UserUpsert
from src.api.services._validation import clean, require


# PUBLIC_INTERFACE
def upsert_user(store: Store, payload: UserUpsert) -> dict:
    """Create a user, or overwrite name/role/siteId/lastActive of an existing one."""
    require("id, name, and role are required", payload.id, payload.name, payload.role)
    return store.users.update(
        clean(payload.id),
        {
            "name": clean(payload.name),
            "role": clean(payload.role),
            "siteId": clean(payload.site_id) or None,
            "lastActive": to_epoch_ms(utc_now()),
        },
        upsert=True,
        on_insert={"acknowledged": False, "needsHelp": False},
    )


# PUBLIC_INTERFACE
def list_users(store: Store) -> List[dict]:
    """All users in natural order."""
    return store.users.list()


# PUBLIC_INTERFACE
def get_user_by_id(store: Store, user_id: str) -> dict:
    """Exact lookup by user id."""
    user = store.users.get(user_id)
    if not user:
        raise NotFound("User not found")
    return user
