from __future__ import annotations

import logging
from typing import List

from pymongo import ASCENDING

from src.api.db.store import Store
from src.api.errors import NotFound, StorageError
from src.api.schemas.common import to_epoch_ms, utc_now
from src.api.schemas.sites import JoinSiteRequest, SiteCreate
from src.api.services._validation import clean, require
from src.api.services.ids import IdGenerator

logger = logging.getLogger(__name__)

SAMPLE_SITES = (
    ("sample-1", "Test Construction Site", "TEST1"),
    ("sample-2", "Demo Building Project", "DEMO2"),
    ("sample-3", "Sample Renovation", "SAMP3"),
)


# PUBLIC_INTERFACE
def create_site(store: Store, ids: IdGenerator, payload: SiteCreate, company_id: str) -> dict:
    """Register a site with a fresh id and join code."""
    name = clean(payload.name)
    manager_id = clean(payload.manager_id)
    require("Name and managerId are required", name, manager_id)

    doc = {
        "id": ids.new_id(),
        "name": name,
        "siteCode": ids.site_code(),
        "createdAt": to_epoch_ms(utc_now()),
        "managerId": manager_id,
        "companyId": company_id,
    }
    try:
        return store.sites.insert(doc)
    except StorageError as exc:
        raise StorageError("Failed to create site", exc.error) from exc


# PUBLIC_INTERFACE
def list_sites(store: Store) -> List[dict]:
    """All sites in creation order."""
    return store.sites.list(sort=("createdAt", ASCENDING))


# PUBLIC_INTERFACE
def get_site_by_code(store: Store, code: str) -> dict:
    """Case-insensitive lookup by join code."""
    site = store.sites.find_one({"siteCode": clean(code).upper()})
    if not site:
        raise NotFound("Site not found")
    return site


# PUBLIC_INTERFACE
def get_site_by_id(store: Store, site_id: str) -> dict:
    """Exact lookup by site id."""
    site = store.sites.get(site_id)
    if not site:
        raise NotFound("Site not found")
    return site


# PUBLIC_INTERFACE
def join_site(store: Store, site_id: str, payload: JoinSiteRequest) -> dict:
    """
    Bind a user to a site and return the site.

    A new user starts unacknowledged and not needing help. A returning user keeps
    those flags; only name, role, siteId and lastActive change. No user record is
    written when the site does not exist.
    """
    require("userId, userName, and role are required", payload.user_id, payload.user_name, payload.role)
    site = get_site_by_id(store, site_id)

    store.users.update(
        clean(payload.user_id),
        {
            "name": clean(payload.user_name),
            "role": clean(payload.role),
            "siteId": site_id,
            "lastActive": to_epoch_ms(utc_now()),
        },
        upsert=True,
        on_insert={"acknowledged": False, "needsHelp": False},
    )
    return site


# PUBLIC_INTERFACE
def list_site_users(store: Store, site_id: str) -> List[dict]:
    """Users whose current site is `site_id`."""
    return store.users.list({"siteId": site_id})


# PUBLIC_INTERFACE
def seed_sample_sites(store: Store, company_id: str) -> bool:
    """
    Insert the demo sites when no site exists yet.

    Returns True when the sites were inserted, False when sites already existed.
    """
    if store.sites.count() > 0:
        return False
    now = to_epoch_ms(utc_now())
    for site_id, name, code in SAMPLE_SITES:
        store.sites.insert(
            {
                "id": site_id,
                "name": name,
                "siteCode": code,
                "createdAt": now,
                "managerId": "system",
                "companyId": company_id,
            }
        )
    logger.info("Sample sites initialized: %s", [code for _, _, code in SAMPLE_SITES])
    return True
