# app/database/connection.py
import asyncpg
from typing import Optional
import logging

logger = logging.getLogger(__name__)

class DatabaseConnection:
    """Owns one asyncpg pool, opened and closed by the application lifespan"""

    def __init__(
        self,
        dsn: str,
        ssl: Optional[str] = "prefer",
        min_size: int = 1,
        max_size: int = 10,
        command_timeout: float = 60
    ):
        self.dsn = dsn
        self.ssl = ssl
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: Optional[asyncpg.Pool] = None

    async def get_pool(self) -> asyncpg.Pool:
        """Get or create database connection pool"""
        if self._pool is None:
            try:
                self._pool = await asyncpg.create_pool(
                    self.dsn,
                    ssl=self.ssl,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=self.command_timeout
                )
                logger.info("Database connection pool created")
            except Exception as e:
                logger.error(f"Failed to create database pool: {e}")
                raise
        return self._pool

    async def close_pool(self):
        """Close database connection pool"""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")
