from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from src.api.config import BackendConfig
from src.api.db.mongo import MongoManager
from src.api.errors import StorageError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
# (field, direction) with pymongo.ASCENDING / pymongo.DESCENDING.
SortSpec = Tuple[str, int]

KEY_FIELD = "id"


def _matches(doc: Mapping[str, Any], flt: Optional[Mapping[str, Any]]) -> bool:
    if not flt:
        return True
    return all(doc.get(k) == v for k, v in flt.items())


class DocumentCollection(ABC):
    """
    Storage contract for one flat collection keyed by its `id` field.

    Filters are equality matches on top-level fields. Returned documents are copies;
    mutating them does not change stored state.
    """

    @abstractmethod
    def list(self, flt: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None) -> List[Document]:
        """Return matching documents, in insertion order unless `sort` is given."""

    @abstractmethod
    def get(self, key: str) -> Optional[Document]:
        """Return the document with `id == key`, or None."""

    @abstractmethod
    def find_one(self, flt: Mapping[str, Any]) -> Optional[Document]:
        """Return the first document matching `flt`, or None."""

    @abstractmethod
    def insert(self, doc: Mapping[str, Any]) -> Document:
        """Insert a document and return it."""

    @abstractmethod
    def update(
        self,
        key: str,
        patch: Mapping[str, Any],
        upsert: bool = False,
        on_insert: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Document]:
        """
        Apply `patch` to the document with `id == key` and return the result.

        With `upsert`, a missing document is created from `on_insert` + `patch`.
        Without it, a missing document is left absent and None is returned.
        """

    @abstractmethod
    def update_many(self, flt: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        """Apply `patch` to every matching document; return how many matched."""

    @abstractmethod
    def supersede_and_insert(
        self, flt: Mapping[str, Any], patch: Mapping[str, Any], doc: Mapping[str, Any]
    ) -> Tuple[int, Document]:
        """
        Apply `patch` to every document matching `flt`, then insert `doc`.

        Returns (matched, inserted). Backends that can run both steps as one
        critical section must do so.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored documents."""


class MemoryCollection(DocumentCollection):
    """In-process ordered mapping; lost on restart."""

    def __init__(self) -> None:
        self._docs: "OrderedDict[str, Document]" = OrderedDict()
        self._lock = RLock()

    def list(self, flt: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None) -> List[Document]:
        with self._lock:
            docs = [dict(d) for d in self._docs.values() if _matches(d, flt)]
        if sort is None:
            return docs
        field, direction = sort
        # Ties keep insertion order in the requested direction.
        indexed = sorted(
            enumerate(docs),
            key=lambda pair: (pair[1].get(field) or 0, pair[0]),
            reverse=direction != ASCENDING,
        )
        return [d for _, d in indexed]

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            doc = self._docs.get(key)
            return dict(doc) if doc is not None else None

    def find_one(self, flt: Mapping[str, Any]) -> Optional[Document]:
        with self._lock:
            for doc in self._docs.values():
                if _matches(doc, flt):
                    return dict(doc)
        return None

    def insert(self, doc: Mapping[str, Any]) -> Document:
        stored = dict(doc)
        with self._lock:
            self._docs[stored[KEY_FIELD]] = stored
        return dict(stored)

    def update(
        self,
        key: str,
        patch: Mapping[str, Any],
        upsert: bool = False,
        on_insert: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Document]:
        with self._lock:
            existing = self._docs.get(key)
            if existing is None:
                if not upsert:
                    return None
                existing = {KEY_FIELD: key, **dict(on_insert or {})}
                self._docs[key] = existing
            existing.update(patch)
            return dict(existing)

    def update_many(self, flt: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        matched = 0
        with self._lock:
            for doc in self._docs.values():
                if _matches(doc, flt):
                    doc.update(patch)
                    matched += 1
        return matched

    def supersede_and_insert(
        self, flt: Mapping[str, Any], patch: Mapping[str, Any], doc: Mapping[str, Any]
    ) -> Tuple[int, Document]:
        # Both steps under one lock hold.
        with self._lock:
            matched = self.update_many(flt, patch)
            inserted = self.insert(doc)
        return matched, inserted

    def count(self) -> int:
        with self._lock:
            return len(self._docs)


@contextmanager
def _storage_errors(op: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        logger.error("Mongo %s failed: %s", op, exc)
        raise StorageError(str(exc)) from exc


class MongoCollection(DocumentCollection):
    """Delegates to a pymongo collection; `_id` is never exposed to callers."""

    def __init__(self, collection: Collection):
        self._col = collection

    def list(self, flt: Optional[Mapping[str, Any]] = None, sort: Optional[SortSpec] = None) -> List[Document]:
        with _storage_errors("find"):
            cursor = self._col.find(dict(flt or {}), projection={"_id": 0})
            if sort is not None:
                field, direction = sort
                # _id breaks ties by insertion order, matching the memory backend.
                cursor = cursor.sort([(field, direction), ("_id", direction)])
            return list(cursor)

    def get(self, key: str) -> Optional[Document]:
        return self.find_one({KEY_FIELD: key})

    def find_one(self, flt: Mapping[str, Any]) -> Optional[Document]:
        with _storage_errors("find_one"):
            return self._col.find_one(dict(flt), projection={"_id": 0})

    def insert(self, doc: Mapping[str, Any]) -> Document:
        # insert_one adds _id to the dict it is given; keep the caller's copy clean.
        to_insert = dict(doc)
        with _storage_errors("insert_one"):
            self._col.insert_one(to_insert)
        to_insert.pop("_id", None)
        return to_insert

    def update(
        self,
        key: str,
        patch: Mapping[str, Any],
        upsert: bool = False,
        on_insert: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Document]:
        update_doc: Dict[str, Any] = {}
        if patch:
            update_doc["$set"] = dict(patch)
        # A field may not appear in both $set and $setOnInsert.
        insert_only = {k: v for k, v in (on_insert or {}).items() if k not in patch}
        if upsert and insert_only:
            update_doc["$setOnInsert"] = insert_only
        if not update_doc:
            return self.get(key)
        with _storage_errors("find_one_and_update"):
            return self._col.find_one_and_update(
                {KEY_FIELD: key},
                update_doc,
                projection={"_id": 0},
                upsert=upsert,
                return_document=ReturnDocument.AFTER,
            )

    def update_many(self, flt: Mapping[str, Any], patch: Mapping[str, Any]) -> int:
        with _storage_errors("update_many"):
            res = self._col.update_many(dict(flt), {"$set": dict(patch)})
        return int(res.matched_count)

    def supersede_and_insert(
        self, flt: Mapping[str, Any], patch: Mapping[str, Any], doc: Mapping[str, Any]
    ) -> Tuple[int, Document]:
        # Two server operations; MongoDB guarantees atomicity per operation only.
        matched = self.update_many(flt, patch)
        return matched, self.insert(doc)

    def count(self) -> int:
        with _storage_errors("count_documents"):
            return int(self._col.count_documents({}))


@dataclass(frozen=True)
class Store:
    """The four collections of the service, all backed by the same backend."""

    backend: str
    sites: DocumentCollection
    users: DocumentCollection
    alerts: DocumentCollection
    toolbox_talks: DocumentCollection

    # PUBLIC_INTERFACE
    @classmethod
    def memory(cls) -> "Store":
        """Build a fresh in-memory store."""
        return cls(
            backend="memory",
            sites=MemoryCollection(),
            users=MemoryCollection(),
            alerts=MemoryCollection(),
            toolbox_talks=MemoryCollection(),
        )

    # PUBLIC_INTERFACE
    @classmethod
    def mongo(cls, manager: MongoManager) -> "Store":
        """Build a store over the manager's Mongo collections."""
        cols = manager.collections()
        return cls(
            backend="mongo",
            sites=MongoCollection(cols.sites),
            users=MongoCollection(cols.users),
            alerts=MongoCollection(cols.alerts),
            toolbox_talks=MongoCollection(cols.toolbox_talks),
        )


class StoreProvider:
    """
    Resolves the backend lazily on first use and caches it for the process lifetime.

    Mongo is used only when a URI is configured and answers a ping. A failed attempt
    falls back to memory for good; it is never retried mid-process.
    """

    def __init__(
        self,
        config: BackendConfig,
        manager_factory: Callable[..., MongoManager] = MongoManager,
    ):
        self._config = config
        self._manager_factory = manager_factory
        self._manager: Optional[MongoManager] = None
        self._store: Optional[Store] = None
        self._lock = RLock()

    @property
    def resolved(self) -> bool:
        return self._store is not None

    def get(self) -> Store:
        """Return the active store, resolving it on first call."""
        with self._lock:
            if self._store is None:
                self._store = self._resolve()
            return self._store

    def _resolve(self) -> Store:
        cfg = self._config
        if not cfg.mongo_uri:
            logger.info("Storage backend: memory (no Mongo URI configured)")
            return Store.memory()

        manager = self._manager_factory(
            cfg.mongo_uri,
            db_name=cfg.mongo_db_name,
            server_selection_timeout_ms=cfg.mongo_server_selection_timeout_ms,
        )
        if not manager.ping():
            logger.warning(
                "MongoDB not available (source=%s); falling back to in-memory storage for this process",
                cfg.mongo_uri_source,
            )
            manager.close()
            return Store.memory()

        try:
            manager.init_indexes()
        except PyMongoError:
            logger.warning("Failed to create Mongo indexes", exc_info=True)

        self._manager = manager
        logger.info("Storage backend: mongo (source=%s)", cfg.mongo_uri_source)
        return Store.mongo(manager)

    def close(self) -> None:
        """Close the Mongo client if one was opened."""
        with self._lock:
            if self._manager is not None:
                self._manager.close()
                self._manager = None
