"""Tests for the PostgreSQL subscriber store.

Unit tests run against an in-memory stand-in for the asyncpg pool. The
integration tests need a real database and are skipped unless
TEST_DATABASE_URL is set.
"""

import asyncio
import os
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest

from app.database.connection import DatabaseConnection
from app.database.subscriber_repository import SCHEMA_STATEMENTS
from app.errors import StoreUnavailable
from app.models.subscriber import InsertStatus
from app.subscribers import PostgresSubscriberStore


class FakeConnection:
    """Mimics the asyncpg calls made by SubscriberRepository."""

    def __init__(self):
        self.rows = {}
        self.executed = []
        self.fail_with = None
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def execute(self, query, *args):
        self._check()
        self.executed.append(query)
        return "OK"

    async def fetchrow(self, query, email, ip):
        self._check()
        assert "ON CONFLICT (email) DO NOTHING" in query
        if email in self.rows:
            return None
        self._clock += timedelta(seconds=1)
        row = {"email": email, "created_at": self._clock, "ip": ip}
        self.rows[email] = row
        return row

    async def fetch(self, query):
        self._check()
        assert "ORDER BY created_at DESC" in query
        return sorted(self.rows.values(), key=lambda r: r["created_at"], reverse=True)

    async def fetchval(self, query):
        self._check()
        return 1


class FakePool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


class FakeDatabase:
    def __init__(self):
        self.conn = FakeConnection()
        self.pool = FakePool(self.conn)
        self.closed = False

    async def get_pool(self):
        return self.pool

    async def close_pool(self):
        self.closed = True


@pytest.fixture
async def fake_db():
    return FakeDatabase()


@pytest.fixture
async def pg_store(fake_db):
    store = PostgresSubscriberStore(fake_db)
    await store.init()
    return store


class TestPostgresStoreUnit:
    async def test_init_runs_schema_statements(self, pg_store, fake_db):
        assert fake_db.conn.executed == SCHEMA_STATEMENTS
        assert any("UNIQUE INDEX" in s for s in SCHEMA_STATEMENTS)
        assert any("LOWER(email)" in s for s in SCHEMA_STATEMENTS)
        assert all("IF NOT EXISTS" in s for s in SCHEMA_STATEMENTS)

    async def test_inserted_only_when_row_returned(self, pg_store):
        first = await pg_store.try_insert("a@b.com", "10.0.0.1")
        assert first.status == InsertStatus.INSERTED
        assert first.record.email == "a@b.com"
        assert first.record.ip == "10.0.0.1"

        second = await pg_store.try_insert("a@b.com", "10.0.0.9")
        assert second.status == InsertStatus.ALREADY_EXISTS

    async def test_list_all_newest_first(self, pg_store):
        for email in ("one@example.com", "two@example.com", "three@example.com"):
            await pg_store.try_insert(email)

        records = await pg_store.list_all()
        assert [r.email for r in records] == [
            "three@example.com",
            "two@example.com",
            "one@example.com",
        ]

    @pytest.mark.parametrize("error", [OSError("connection refused"), asyncio.TimeoutError()])
    async def test_driver_errors_become_store_unavailable(self, pg_store, fake_db, error):
        fake_db.conn.fail_with = error
        with pytest.raises(StoreUnavailable):
            await pg_store.try_insert("a@b.com")
        with pytest.raises(StoreUnavailable):
            await pg_store.list_all()
        with pytest.raises(StoreUnavailable):
            await pg_store.ping()

    async def test_init_failure_raises_store_unavailable(self, fake_db):
        fake_db.conn.fail_with = OSError("no route to host")
        with pytest.raises(StoreUnavailable):
            await PostgresSubscriberStore(fake_db).init()

    async def test_close_closes_pool(self, pg_store, fake_db):
        await pg_store.close()
        assert fake_db.closed


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

requires_postgres = pytest.mark.skipif(
    not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set"
)


@pytest.fixture
async def live_store():
    database = DatabaseConnection(TEST_DATABASE_URL, ssl=None, min_size=2, max_size=4)
    store = PostgresSubscriberStore(database)
    await store.init()
    pool = await database.get_pool()
    async with pool.acquire() as conn:
        await conn.execute("TRUNCATE subscribers RESTART IDENTITY")
    yield store
    await store.close()


@requires_postgres
class TestPostgresStoreIntegration:
    async def test_schema_init_is_idempotent(self, live_store):
        await live_store.init()
        await live_store.init()

    async def test_insert_then_already_exists(self, live_store):
        first = await live_store.try_insert("a@b.com", "10.0.0.1")
        second = await live_store.try_insert("a@b.com", "10.0.0.2")

        assert first.inserted
        assert second.status == InsertStatus.ALREADY_EXISTS

        records = await live_store.list_all()
        assert len(records) == 1
        assert records[0].created_at == first.record.created_at
        assert records[0].ip == "10.0.0.1"

    async def test_concurrent_inserts_yield_exactly_one_inserted(self, live_store):
        for attempt in range(10):
            email = f"race{attempt}@example.com"
            outcomes = await asyncio.gather(
                live_store.try_insert(email), live_store.try_insert(email)
            )
            statuses = sorted(o.status.value for o in outcomes)
            assert statuses == ["already_exists", "inserted"]

    async def test_list_all_counts_and_order(self, live_store):
        emails = [f"user{i}@example.com" for i in range(4)]
        for email in emails:
            await live_store.try_insert(email)

        records = await live_store.list_all()
        assert len(records) == len(emails)
        timestamps = [r.created_at for r in records]
        assert timestamps == sorted(timestamps, reverse=True)
