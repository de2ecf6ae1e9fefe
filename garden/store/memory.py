"""In-process realtime document store.

Holds every collection in dictionaries and pushes snapshots to subscribers
synchronously after each write. Several GardenSync instances sharing one
MemoryStore behave like several clients connected to the same backend,
which is how the sync layer is exercised without a live store.
"""

import copy
import itertools
import logging
import threading
from typing import Any

from ..exceptions import ResourceNotFound
from ..utils import uid
from .base import (
    Document,
    NotifyingStore,
    OrderBy,
    check_collection_path,
    sort_documents,
    split_document_path,
)

logger = logging.getLogger(__name__)


class MemoryStore(NotifyingStore):
    """Document store kept in memory.

    Documents are deep-copied on the way in and out, so callers can never
    mutate stored state through a returned dict.
    """

    def __init__(self):
        super().__init__()
        # collection path -> document id -> (insertion sequence, fields)
        self._collections: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    def create(self, collection: str, fields: dict[str, Any]) -> str:
        collection = check_collection_path(collection)
        with self._lock:
            doc_id = uid.generate_id()
            self._collections.setdefault(collection, {})[doc_id] = (
                next(self._sequence),
                copy.deepcopy(fields),
            )
        self._publish(f"{collection}/{doc_id}")
        return doc_id

    def update(self, path: str, fields: dict[str, Any]) -> None:
        collection, doc_id = split_document_path(path)
        with self._lock:
            documents = self._collections.get(collection, {})
            if doc_id not in documents:
                raise ResourceNotFound(
                    f"Document '{path}' not found",
                    {"path": path},
                )
            sequence, data = documents[doc_id]
            merged = {**data, **copy.deepcopy(fields)}
            documents[doc_id] = (sequence, merged)
        self._publish(path)

    def set(self, path: str, fields: dict[str, Any]) -> None:
        collection, doc_id = split_document_path(path)
        with self._lock:
            documents = self._collections.setdefault(collection, {})
            sequence = documents[doc_id][0] if doc_id in documents else next(self._sequence)
            documents[doc_id] = (sequence, copy.deepcopy(fields))
        self._publish(path)

    def delete(self, path: str) -> bool:
        collection, doc_id = split_document_path(path)
        path = f"{collection}/{doc_id}"
        with self._lock:
            existed = self._collections.get(collection, {}).pop(doc_id, None) is not None
            # Cascade to subcollections (e.g. a memory's comments)
            for name in [c for c in self._collections if c.startswith(f"{path}/")]:
                del self._collections[name]
        if existed:
            self._publish(path)
        else:
            logger.debug("Delete of missing document %s ignored", path)
        return existed

    def get(self, path: str) -> Document | None:
        collection, doc_id = split_document_path(path)
        with self._lock:
            entry = self._collections.get(collection, {}).get(doc_id)
            if entry is None:
                return None
            return Document(doc_id, copy.deepcopy(entry[1]))

    def query_once(self, collection: str, order_by: OrderBy | None = None) -> list[Document]:
        collection = check_collection_path(collection)
        with self._lock:
            pairs = [
                (sequence, Document(doc_id, copy.deepcopy(data)))
                for doc_id, (sequence, data) in self._collections.get(collection, {}).items()
            ]
        return list(sort_documents(pairs, order_by))
