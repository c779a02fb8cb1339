import asyncio

import pytest

from scoreledger.ledger.errors import StoreUnavailable
from scoreledger.ledger.ledger import ScoreLedger
from scoreledger.storage.memory import MemoryStore
from scoreledger.storage.sqlite import SqliteStore


class YieldingStore(MemoryStore):
    """Memory store that hands control back to the loop before every call.

    Lets concurrent ledger calls interleave between their read and write.
    """

    async def get_by_key(self, user_name):
        await asyncio.sleep(0)
        return await super().get_by_key(user_name)

    async def insert_if_absent(self, record):
        await asyncio.sleep(0)
        return await super().insert_if_absent(record)

    async def update_if_greater(self, user_name, candidate):
        await asyncio.sleep(0)
        return await super().update_if_greater(user_name, candidate)


class UnreachableStore(MemoryStore):
    """Opens fine, then fails every data call like a dropped connection."""

    def _check(self):
        raise StoreUnavailable("connection refused")


@pytest.fixture
async def memory_store():
    store = MemoryStore()
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def sqlite_path(tmp_path):
    return str(tmp_path / "scores.sqlite3")


@pytest.fixture
async def sqlite_store(sqlite_path):
    store = SqliteStore(sqlite_path, timeout=5.0)
    await store.open()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "yielding", "sqlite"])
async def store(request, sqlite_path):
    if request.param == "memory":
        s = MemoryStore()
    elif request.param == "yielding":
        s = YieldingStore()
    else:
        s = SqliteStore(sqlite_path, timeout=5.0)
    await s.open()
    yield s
    await s.close()


@pytest.fixture
def ledger(store):
    return ScoreLedger(store)


@pytest.fixture
async def unreachable_store():
    store = UnreachableStore()
    await store.open()
    return store
