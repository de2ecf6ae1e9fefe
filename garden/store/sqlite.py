"""Durable document store on SQLite.

ARCHITECTURE:
- One ``document`` table holds every collection; fields are a JSON object
- Ordering uses json_extract on the requested field, insertion sequence
  (``seq``) breaks ties
- Each primitive runs in its own short transaction; the connection is
  opened per operation and closed afterwards (WAL mode for concurrent readers)
- Change notifications fan out in-process only: clients sharing one
  SqliteStore instance see each other's writes pushed, other processes
  see them on their next subscribe or query

ERRORS:
- sqlite3.OperationalError (locked database, I/O failure) is surfaced as
  TransientStoreError; the operation may be re-issued
- update() of a missing document raises ResourceNotFound
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from ..exceptions import ResourceNotFound, TransientStoreError
from ..host.environment import get_store_path
from ..schemas import get_sql_schema
from ..utils import uid
from .base import (
    Document,
    NotifyingStore,
    OrderBy,
    check_collection_path,
    split_document_path,
)

logger = logging.getLogger(__name__)

FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqliteStore(NotifyingStore):
    """Document store persisted in a SQLite file.

    Example:
        >>> store = SqliteStore("/tmp/garden.db")
        >>> store.init_schema()
        >>> seed_id = store.create("seeds", {"message": "hi", ...})
    """

    def __init__(self, db_path: str | Path | None = None):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file. If None, resolved via
                get_store_path() from environment variables.
        """
        super().__init__()
        self.db_path = Path(db_path) if db_path else get_store_path()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _transaction(self, operation: str, path: str) -> Iterator[sqlite3.Connection]:
        """Run one primitive atomically.

        Commits on success, rolls back on any exception and always closes
        the connection.

        Raises:
            TransientStoreError: If SQLite reports an operational failure
        """
        try:
            conn = self._connect()
        except sqlite3.OperationalError as e:
            raise TransientStoreError(
                f"Could not open store at {self.db_path}: {e}", operation, path
            ) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            raise TransientStoreError(f"Store {operation} failed for {path}: {e}", operation, path) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ==========================================================================
    # INITIALIZATION
    # ==========================================================================

    def init_schema(self) -> None:
        """Create tables if they do not exist yet. Safe to call repeatedly."""
        with self._transaction("init_schema", str(self.db_path)) as conn:
            conn.executescript(get_sql_schema())

    def get_schema_version(self) -> str | None:
        with self._transaction("get_schema_version", str(self.db_path)) as conn:
            row = conn.execute(
                "SELECT value FROM _schema_metadata WHERE key = 'version'"
            ).fetchone()
        return row[0] if row else None

    # ==========================================================================
    # WRITES
    # ==========================================================================

    def create(self, collection: str, fields: dict[str, Any]) -> str:
        collection = check_collection_path(collection)
        doc_id = uid.generate_id()
        with self._transaction("create", collection) as conn:
            conn.execute(
                "INSERT INTO document (collection, id, data) VALUES (?, ?, ?)",
                (collection, doc_id, json.dumps(fields)),
            )
        self._publish(f"{collection}/{doc_id}")
        return doc_id

    def update(self, path: str, fields: dict[str, Any]) -> None:
        collection, doc_id = split_document_path(path)
        with self._transaction("update", path) as conn:
            row = conn.execute(
                "SELECT data FROM document WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
            if row is None:
                raise ResourceNotFound(f"Document '{path}' not found", {"path": path})
            merged = {**json.loads(row["data"]), **fields}
            conn.execute(
                "UPDATE document SET data = ? WHERE collection = ? AND id = ?",
                (json.dumps(merged), collection, doc_id),
            )
        self._publish(path)

    def set(self, path: str, fields: dict[str, Any]) -> None:
        collection, doc_id = split_document_path(path)
        with self._transaction("set", path) as conn:
            conn.execute(
                """INSERT INTO document (collection, id, data) VALUES (?, ?, ?)
                   ON CONFLICT (collection, id) DO UPDATE SET data = excluded.data""",
                (collection, doc_id, json.dumps(fields)),
            )
        self._publish(path)

    def delete(self, path: str) -> bool:
        collection, doc_id = split_document_path(path)
        path = f"{collection}/{doc_id}"
        with self._transaction("delete", path) as conn:
            cursor = conn.execute(
                "DELETE FROM document WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
            existed = cursor.rowcount > 0
            # Cascade to subcollections (e.g. a memory's comments)
            conn.execute(
                "DELETE FROM document WHERE substr(collection, 1, ?) = ?",
                (len(path) + 1, f"{path}/"),
            )
        if existed:
            self._publish(path)
        else:
            logger.debug("Delete of missing document %s ignored", path)
        return existed

    # ==========================================================================
    # READS
    # ==========================================================================

    def get(self, path: str) -> Document | None:
        collection, doc_id = split_document_path(path)
        with self._transaction("get", path) as conn:
            row = conn.execute(
                "SELECT id, data FROM document WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        if row is None:
            return None
        return Document(row["id"], json.loads(row["data"]))

    def query_once(self, collection: str, order_by: OrderBy | None = None) -> list[Document]:
        collection = check_collection_path(collection)
        params: list[Any] = [collection]
        order_clause = "seq ASC"
        if order_by is not None:
            if not FIELD_NAME.match(order_by.field):
                raise ValueError(f"Invalid order_by field: {order_by.field!r}")
            direction = "DESC" if order_by.descending else "ASC"
            json_path = f"$.{order_by.field}"
            # Documents missing the field sort as nulls: first ascending, last descending
            order_clause = (
                f"json_extract(data, ?) IS NOT NULL {direction}, "
                f"json_extract(data, ?) {direction}, seq ASC"
            )
            params.extend([json_path, json_path])

        with self._transaction("query", collection) as conn:
            rows = conn.execute(
                f"SELECT id, data FROM document WHERE collection = ? ORDER BY {order_clause}",
                params,
            ).fetchall()
        return [Document(row["id"], json.loads(row["data"])) for row in rows]


def get_store(db_path: str | Path | None = None) -> SqliteStore:
    """Get an initialized SQLite document store.

    Args:
        db_path: Optional explicit path; resolved from the environment if None
    """
    store = SqliteStore(db_path)
    store.init_schema()
    return store
