# app/database/subscriber_repository.py
import asyncpg
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS subscribers (
        id SERIAL PRIMARY KEY,
        email TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        ip TEXT
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS subscribers_email_key ON subscribers(email)",
    "CREATE INDEX IF NOT EXISTS idx_subscribers_email_lower ON subscribers(LOWER(email))",
    "CREATE INDEX IF NOT EXISTS idx_subscribers_created ON subscribers(created_at)",
]

class SubscriberRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def ensure_schema(self):
        """Create the subscribers table and its indexes if missing"""
        for statement in SCHEMA_STATEMENTS:
            await self.conn.execute(statement)
        logger.info("Subscribers schema ready")

    async def insert_if_absent(self, email: str, ip: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Insert a subscriber, returning the new row or None when the email exists"""
        query = """
            INSERT INTO subscribers (email, created_at, ip)
            VALUES ($1, NOW(), $2)
            ON CONFLICT (email) DO NOTHING
            RETURNING email, created_at, ip
        """

        result = await self.conn.fetchrow(query, email, ip)
        return dict(result) if result else None

    async def list_all(self) -> List[Dict[str, Any]]:
        query = """
            SELECT email, created_at, ip
            FROM subscribers
            ORDER BY created_at DESC, id DESC
        """

        rows = await self.conn.fetch(query)
        return [dict(row) for row in rows]

    async def ping(self) -> bool:
        return await self.conn.fetchval("SELECT 1") == 1
