"""Document store implementations.

The sync layer depends only on ``DocumentStore``; ``MemoryStore`` and
``SqliteStore`` are the two backends shipped with the package.
"""

from .base import (
    Document,
    DocumentStore,
    NotifyingStore,
    OrderBy,
    Snapshot,
    Subscription,
    split_document_path,
)
from .memory import MemoryStore
from .sqlite import SqliteStore, get_store

__all__ = [
    "Document",
    "DocumentStore",
    "MemoryStore",
    "NotifyingStore",
    "OrderBy",
    "Snapshot",
    "SqliteStore",
    "Subscription",
    "get_store",
    "split_document_path",
]
