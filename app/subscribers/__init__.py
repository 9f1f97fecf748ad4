# app/subscribers/__init__.py
import logging

from app.config import Settings
from app.database.connection import DatabaseConnection
from app.errors import StoreUnavailable
from .base import SubscriberStore
from .export import to_csv
from .json_file import JsonFileSubscriberStore
from .postgres import PostgresSubscriberStore

logger = logging.getLogger(__name__)

def build_store(settings: Settings) -> SubscriberStore:
    """Construct the store variant selected by STORE_BACKEND"""
    backend = settings.store_backend.strip().lower()

    if backend == "postgres":
        if not settings.database_url:
            raise StoreUnavailable("DATABASE_URL environment variable not set")
        logger.info("Using relational subscriber store (PostgreSQL, unique email constraint)")
        database = DatabaseConnection(
            settings.database_url,
            ssl=settings.db_ssl_mode,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            command_timeout=settings.db_command_timeout
        )
        return PostgresSubscriberStore(database)

    if backend == "json":
        logger.info(
            f"Using document subscriber store ({settings.data_file}, "
            f"serialize_writes={settings.serialize_writes})"
        )
        return JsonFileSubscriberStore(settings.data_file, serialize_writes=settings.serialize_writes)

    raise ValueError(f"Unknown STORE_BACKEND: {settings.store_backend}")

__all__ = [
    'SubscriberStore',
    'PostgresSubscriberStore',
    'JsonFileSubscriberStore',
    'build_store',
    'to_csv'
]
