from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from src.api.config import DEFAULT_DB_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MongoCollections:
    """Convenience wrapper for app collections."""

    sites: Collection
    users: Collection
    alerts: Collection
    toolbox_talks: Collection


class MongoManager:
    """
    MongoDB connection manager.

    Maintains one MongoClient for the app's storage DB. The database name comes from
    the explicit `db_name`, else the URI path, else DEFAULT_DB_NAME.
    """

    def __init__(self, mongo_uri: str, db_name: Optional[str] = None, server_selection_timeout_ms: int = 5000):
        self._mongo_uri = mongo_uri
        self._db_name = db_name
        self._server_selection_timeout_ms = int(server_selection_timeout_ms)
        self._client: Optional[MongoClient] = None
        self._lock = RLock()

    def connect(self) -> None:
        """Initialize the Mongo client if needed."""
        with self._lock:
            if self._client is not None:
                return
            # MongoClient is thread-safe and manages internal pooling.
            self._client = MongoClient(
                self._mongo_uri,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
            )

    # PUBLIC_INTERFACE
    def ping(self, timeout_ms: int = 1500) -> bool:
        """
        Ping the configured MongoDB to validate connectivity.

        Used once by backend selection; a False result makes the process fall back to memory.
        """
        try:
            if self._client is None:
                self.connect()
            assert self._client is not None
            self._client.admin.command("ping", maxTimeMS=int(max(250, timeout_ms)))
            return True
        except PyMongoError:
            logger.exception("Mongo ping failed (PyMongoError)")
            return False
        except Exception:
            logger.exception("Mongo ping failed (unexpected)")
            return False

    def close(self) -> None:
        """Close the Mongo client."""
        with self._lock:
            if self._client is not None:
                try:
                    self._client.close()
                except Exception:
                    logger.exception("Error closing MongoClient")
                self._client = None

    def db(self) -> Database:
        """Return the app database handle."""
        if self._client is None:
            self.connect()
        assert self._client is not None
        if self._db_name:
            return self._client[self._db_name]
        return self._client.get_default_database(default=DEFAULT_DB_NAME)

    def collections(self) -> MongoCollections:
        """Return app collections."""
        db = self.db()
        return MongoCollections(
            sites=db["sites"],
            users=db["users"],
            alerts=db["alerts"],
            toolbox_talks=db["toolboxTalks"],
        )

    def init_indexes(self) -> None:
        """Create required indexes (idempotent)."""
        cols = self.collections()

        # ---- Sites ----
        cols.sites.create_index([("id", ASCENDING)], unique=True, name="idx_sites_id")
        cols.sites.create_index([("siteCode", ASCENDING)], name="idx_sites_siteCode")
        cols.sites.create_index([("createdAt", ASCENDING)], name="idx_sites_createdAt")

        # ---- Users ----
        cols.users.create_index([("id", ASCENDING)], unique=True, name="idx_users_id")
        cols.users.create_index([("siteId", ASCENDING)], name="idx_users_siteId")

        # ---- Alerts ----
        # Supersession query: siteId + active.
        cols.alerts.create_index([("id", ASCENDING)], unique=True, name="idx_alerts_id")
        cols.alerts.create_index([("siteId", ASCENDING), ("active", ASCENDING)], name="idx_alerts_site_active")
        cols.alerts.create_index([("siteId", ASCENDING), ("timestamp", DESCENDING)], name="idx_alerts_site_ts")

        # ---- Toolbox talks ----
        cols.toolbox_talks.create_index([("id", ASCENDING)], unique=True, name="idx_talks_id")
        cols.toolbox_talks.create_index(
            [("siteId", ASCENDING), ("timestamp", DESCENDING)], name="idx_talks_site_ts"
        )
