# app/subscribers/postgres.py
import asyncio
import asyncpg
import logging
from typing import List, Optional

from app.database.connection import DatabaseConnection
from app.database.subscriber_repository import SubscriberRepository
from app.errors import StoreUnavailable
from app.models.subscriber import InsertOutcome, SubscriberRecord

logger = logging.getLogger(__name__)

STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

class PostgresSubscriberStore:
    """Relational store backed by a UNIQUE index on the canonical email.

    Inserts use ``INSERT ... ON CONFLICT DO NOTHING`` so the check and the
    insert are a single statement; concurrent requests for the same new email
    yield exactly one INSERTED.
    """

    backend_name = "postgres"

    def __init__(self, database: DatabaseConnection):
        self.database = database

    async def init(self):
        """Open the pool and prepare the schema (idempotent)"""
        try:
            pool = await self.database.get_pool()
            async with pool.acquire() as conn:
                await SubscriberRepository(conn).ensure_schema()
        except STORE_ERRORS as e:
            logger.error(f"Failed to prepare subscribers table: {e}")
            raise StoreUnavailable(f"Database unavailable: {e}") from e

    async def close(self):
        await self.database.close_pool()

    async def ping(self):
        try:
            pool = await self.database.get_pool()
            async with pool.acquire() as conn:
                await SubscriberRepository(conn).ping()
        except STORE_ERRORS as e:
            logger.error(f"Database health check failed: {e}")
            raise StoreUnavailable(f"Database unavailable: {e}") from e

    async def try_insert(self, email: str, ip: Optional[str] = None) -> InsertOutcome:
        try:
            pool = await self.database.get_pool()
            async with pool.acquire() as conn:
                row = await SubscriberRepository(conn).insert_if_absent(email, ip)
        except STORE_ERRORS as e:
            logger.error(f"Subscription insert failed for {email}: {e}")
            raise StoreUnavailable() from e

        if row is None:
            logger.info(f"Subscriber already present: {email}")
            return InsertOutcome.already_exists()

        logger.info(f"Subscription created: {email}")
        return InsertOutcome.created(SubscriberRecord(**row))

    async def list_all(self) -> List[SubscriberRecord]:
        try:
            pool = await self.database.get_pool()
            async with pool.acquire() as conn:
                rows = await SubscriberRepository(conn).list_all()
        except STORE_ERRORS as e:
            logger.error(f"Failed to load subscribers: {e}")
            raise StoreUnavailable() from e

        return [SubscriberRecord(**row) for row in rows]
