# app/database/__init__.py
from .connection import DatabaseConnection
from .subscriber_repository import SubscriberRepository

__all__ = ["DatabaseConnection", "SubscriberRepository"]
