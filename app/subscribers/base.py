# app/subscribers/base.py
from __future__ import annotations

from typing import List, Optional, Protocol

from app.models.subscriber import InsertOutcome, SubscriberRecord


class SubscriberStore(Protocol):
    """Durable set of subscribers keyed by canonical email.

    Implementations must never update or delete an existing record:
    ``try_insert`` on a known email reports ``ALREADY_EXISTS`` and leaves the
    stored ``created_at`` untouched. ``list_all`` returns records newest first.
    Failures of the backing medium surface as ``StoreUnavailable``.
    """

    backend_name: str

    async def init(self) -> None:
        ...

    async def close(self) -> None:
        ...

    async def ping(self) -> None:
        ...

    async def try_insert(self, email: str, ip: Optional[str] = None) -> InsertOutcome:
        ...

    async def list_all(self) -> List[SubscriberRecord]:
        ...
