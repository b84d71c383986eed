import asyncio

import pytest

from conversion_app.core import db


class FakePool:
    created = []

    def __init__(self, conninfo, min_size, max_size, open, timeout):
        self.conninfo = conninfo
        self.opened = False
        self.closed = False
        FakePool.created.append(self)

    async def open(self, wait, timeout):
        self.opened = True

    async def close(self):
        self.closed = True


class UnreachablePool(FakePool):
    async def open(self, wait, timeout):
        raise ConnectionError("no route to ledger DB")


@pytest.fixture(autouse=True)
def fresh_pool(monkeypatch):
    FakePool.created = []
    monkeypatch.setattr(db, "_pool", None)


def test_pool_is_opened_once(monkeypatch):
    monkeypatch.setattr(db, "AsyncConnectionPool", FakePool)

    async def run():
        first = await db.init_pool()
        second = await db.init_pool()
        return first, second

    first, second = asyncio.run(run())

    assert first is second
    assert len(FakePool.created) == 1
    assert first.opened
    assert first.conninfo == db.DATABASE_DSN


def test_close_resets_pool(monkeypatch):
    monkeypatch.setattr(db, "AsyncConnectionPool", FakePool)

    async def run():
        pool = await db.init_pool()
        await db.close_pool()
        return pool

    pool = asyncio.run(run())

    assert pool.closed
    assert db._pool is None


def test_failed_open_is_not_cached(monkeypatch):
    monkeypatch.setattr(db, "AsyncConnectionPool", UnreachablePool)

    with pytest.raises(ConnectionError):
        asyncio.run(db.init_pool())

    assert db._pool is None
