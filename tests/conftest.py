"""Pytest fixtures for garden tests."""

from datetime import datetime, timezone

import pytest

from garden.admin import create_seed
from garden.core.types import SeedColor
from garden.exceptions import TransientStoreError
from garden.host.time import FixedClock
from garden.store import MemoryStore, SqliteStore
from garden.sync import GardenSync


@pytest.fixture
def t0():
    """Fixed UTC start instant shared by the clock and expected values."""
    return datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0):
    """Clock frozen at t0; tests move it with ``clock.advance(...)``."""
    return FixedClock(t0)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    """SqliteStore on a fresh file under tmp_path, schema initialized."""
    store = SqliteStore(tmp_path / "garden.db")
    store.init_schema()
    return store


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    """Each store implementation in turn."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sqlite_store")


@pytest.fixture
def garden(store, clock):
    """Connected GardenSync over each store backend in turn."""
    sync = GardenSync(store, clock=clock)
    sync.connect()
    try:
        yield sync
    finally:
        sync.disconnect()


@pytest.fixture
def seed(store, clock):
    """A stored one-hour seed."""
    return create_seed(store, "Happy anniversary", 60, SeedColor.SUNSET, now=clock())


class FlakyStore(MemoryStore):
    """MemoryStore whose primitives can be made to fail on demand.

    Add a primitive name ('create', 'delete', 'update', 'set') to
    ``fail_on`` and the next calls to it raise TransientStoreError.
    """

    def __init__(self):
        super().__init__()
        self.fail_on: set[str] = set()

    def _check(self, operation, path):
        if operation in self.fail_on:
            raise TransientStoreError(f"Simulated {operation} failure", operation, path)

    def create(self, collection, fields):
        self._check("create", collection)
        return super().create(collection, fields)

    def update(self, path, fields):
        self._check("update", path)
        super().update(path, fields)

    def set(self, path, fields):
        self._check("set", path)
        super().set(path, fields)

    def delete(self, path):
        self._check("delete", path)
        return super().delete(path)


@pytest.fixture
def flaky_store():
    return FlakyStore()
