"""Document store boundary.

The garden is kept consistent by an external document-oriented realtime
store. This module defines the primitives the sync layer consumes:

    subscribe(collection, order_by, callback)    push-based ordered snapshots
    subscribe_document(document, callback)       push-based single document
    create(collection, fields) -> id
    update(document, fields)                     merge, raises if missing
    set(document, fields)                        overwrite or create
    delete(document) -> existed                  missing document is a no-op
    get(document) -> Document | None
    query_once(collection, order_by)             one-shot ordered read

PATHS:
Collection paths have an odd number of segments ("plants",
"memories/<id>/comments"); document paths have an even number
("plants/<id>", "settings/global").

SUBSCRIPTIONS:
Every subscription is replayed from empty state: the callback receives the
current snapshot immediately on subscribe, then a fresh full snapshot after
every change to that collection. A subscription is cancelled through the
``Subscription`` handle it returns.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple

logger = logging.getLogger(__name__)


class OrderBy(NamedTuple):
    """Ordering key for a collection read."""

    field: str
    descending: bool = False


@dataclass(frozen=True)
class Document:
    """A stored document: store-assigned id plus its fields."""

    id: str
    data: dict[str, Any]


@dataclass(frozen=True)
class Snapshot:
    """Ordered contents of a collection at one point in time."""

    path: str
    documents: tuple[Document, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self):
        return iter(self.documents)


SnapshotCallback = Callable[[Snapshot], None]
DocumentCallback = Callable[["Document | None"], None]


class Subscription:
    """Handle returned by subscribe; ``unsubscribe()`` stops delivery.

    Unsubscribing twice is harmless.
    """

    def __init__(self, cancel: Callable[[], None]):
        self._cancel: Callable[[], None] | None = cancel

    @property
    def active(self) -> bool:
        return self._cancel is not None

    def unsubscribe(self) -> None:
        if self._cancel is not None:
            cancel, self._cancel = self._cancel, None
            cancel()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.unsubscribe()


def split_document_path(path: str) -> tuple[str, str]:
    """Split 'memories/abc/comments/xyz' into ('memories/abc/comments', 'xyz').

    Raises:
        ValueError: If ``path`` is not a document path
    """
    segments = path.strip("/").split("/")
    if len(segments) < 2 or len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


def check_collection_path(path: str) -> str:
    """Validate and normalize a collection path.

    Raises:
        ValueError: If ``path`` is not a collection path
    """
    segments = path.strip("/").split("/")
    if len(segments) % 2 != 1 or not all(segments):
        raise ValueError(f"Not a collection path: {path!r}")
    return "/".join(segments)


def sort_documents(
    documents: list[tuple[int, Document]],
    order_by: OrderBy | None,
) -> tuple[Document, ...]:
    """Order documents by ``order_by`` with insertion sequence as tiebreak.

    Args:
        documents: (insertion sequence, document) pairs
        order_by: Field to order by; None keeps insertion order

    Documents missing the ordering field sort first, as a null would.
    """
    by_sequence = sorted(documents, key=lambda pair: pair[0])
    if order_by is None:
        return tuple(doc for _, doc in by_sequence)

    def key(pair: tuple[int, Document]):
        value = pair[1].data.get(order_by.field)
        return (value is not None, value if value is not None else "")

    # sorted() stays stable with reverse=True, so insertion order breaks ties
    ordered = sorted(by_sequence, key=key, reverse=order_by.descending)
    return tuple(doc for _, doc in ordered)


def notify(callbacks: list[Callable[[Any], None]], payload: Any, path: str) -> None:
    """Deliver ``payload`` to every callback.

    A failing subscriber is logged and skipped; it never fails the write
    that triggered the notification or starves the other subscribers.
    """
    for callback in list(callbacks):
        try:
            callback(payload)
        except Exception:
            logger.exception("Subscriber for %s failed", path)


class DocumentStore(ABC):
    """Abstract document store.

    Implementations are the sole arbiter of write ordering; the sync layer
    never locks.
    """

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        order_by: OrderBy | None,
        callback: SnapshotCallback,
    ) -> Subscription:
        """Register ``callback`` for ordered snapshots of ``collection``."""

    @abstractmethod
    def subscribe_document(self, path: str, callback: DocumentCallback) -> Subscription:
        """Register ``callback`` for one document (None while it does not exist)."""

    @abstractmethod
    def create(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document and return its generated id."""

    @abstractmethod
    def update(self, path: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document.

        Raises:
            ResourceNotFound: If the document does not exist
        """

    @abstractmethod
    def set(self, path: str, fields: dict[str, Any]) -> None:
        """Overwrite (or create) the document at ``path``."""

    @abstractmethod
    def delete(self, path: str) -> bool:
        """Delete a document and its subcollections.

        Returns:
            True if the document existed, False if it was already gone
        """

    @abstractmethod
    def get(self, path: str) -> Document | None:
        """Read one document."""

    @abstractmethod
    def query_once(self, collection: str, order_by: OrderBy | None = None) -> list[Document]:
        """Read a collection once, ordered."""


class NotifyingStore(DocumentStore):
    """DocumentStore with in-process change fan-out.

    Subclasses implement the read and write primitives and call
    ``_publish(path)`` after each committed write. Subscribers receive a full
    re-read of the collection, so every delivery is a consistent snapshot
    rather than a diff.

    Delivery is serialized: a write made from inside a subscriber (or from
    another thread while delivery is running) is queued, and the outermost
    ``_publish`` re-reads and delivers it once the current round is done.
    Every subscriber therefore ends on the latest state.
    """

    def __init__(self):
        self._collection_subscribers: dict[str, list[tuple[OrderBy | None, SnapshotCallback]]] = {}
        self._document_subscribers: dict[str, list[DocumentCallback]] = {}
        self._fanout_lock = threading.RLock()
        self._pending: deque[str] = deque()
        self._delivering = False

    def subscribe(
        self,
        collection: str,
        order_by: OrderBy | None,
        callback: SnapshotCallback,
    ) -> Subscription:
        collection = check_collection_path(collection)
        entry = (order_by, callback)
        with self._fanout_lock:
            self._collection_subscribers.setdefault(collection, []).append(entry)
        logger.debug("Subscribed to %s ordered by %s", collection, order_by)

        def cancel():
            with self._fanout_lock:
                entries = self._collection_subscribers.get(collection, [])
                if entry in entries:
                    entries.remove(entry)

        # Replay from empty state
        callback(Snapshot(collection, tuple(self.query_once(collection, order_by))))
        return Subscription(cancel)

    def subscribe_document(self, path: str, callback: DocumentCallback) -> Subscription:
        split_document_path(path)
        path = path.strip("/")
        with self._fanout_lock:
            self._document_subscribers.setdefault(path, []).append(callback)

        def cancel():
            with self._fanout_lock:
                callbacks = self._document_subscribers.get(path, [])
                if callback in callbacks:
                    callbacks.remove(callback)

        callback(self.get(path))
        return Subscription(cancel)

    def _publish(self, path: str) -> None:
        """Queue a change to document ``path`` and, unless a delivery round is
        already running, deliver every queued change in order.
        """
        with self._fanout_lock:
            self._pending.append(path.strip("/"))
            if self._delivering:
                return
            self._delivering = True

        try:
            while True:
                with self._fanout_lock:
                    if not self._pending:
                        self._delivering = False
                        return
                    path = self._pending.popleft()
                self._deliver(path)
        except BaseException:
            with self._fanout_lock:
                self._delivering = False
            raise

    def _deliver(self, path: str) -> None:
        """Notify subscribers affected by a write to document ``path``.

        Covers the document itself, its collection and, for deletes, any
        subscribed subcollection beneath it.
        """
        collection, _ = split_document_path(path)

        with self._fanout_lock:
            document_callbacks = list(self._document_subscribers.get(path, []))
            affected = {
                name: list(entries)
                for name, entries in self._collection_subscribers.items()
                if entries and (name == collection or name.startswith(f"{path}/"))
            }

        if document_callbacks:
            notify(document_callbacks, self.get(path), path)

        for name, entries in affected.items():
            # Subscribers sharing an ordering get the same snapshot
            snapshots: dict[OrderBy | None, Snapshot] = {}
            for order_by, callback in entries:
                if order_by not in snapshots:
                    snapshots[order_by] = Snapshot(name, tuple(self.query_once(name, order_by)))
                notify([callback], snapshots[order_by], name)
