# app/subscribers/json_file.py
import asyncio
import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.errors import StoreUnavailable
from app.models.subscriber import InsertOutcome, SubscriberRecord

logger = logging.getLogger(__name__)

class JsonFileSubscriberStore:
    """Document store: one JSON file holding ``{"subscriptions": [...]}``.

    ``try_insert`` is a read-modify-write cycle (load, linear scan, append,
    rewrite). It is NOT safe across concurrent writers:

    - two requests for the same new email can both miss it in the scan and
      both append, leaving a duplicate;
    - two requests for different new emails can both report INSERTED while
      the later save overwrites the earlier one, losing an acknowledged
      record.

    Set ``serialize_writes`` to run the cycle under an
    ``asyncio.Lock``, which only covers writers inside this process.

    Each write goes to its own sibling temp file that is renamed over the
    document.
    """

    backend_name = "json"

    def __init__(self, path: str, serialize_writes: bool = False):
        self.path = Path(path)
        self.serialize_writes = serialize_writes
        self._lock = asyncio.Lock() if serialize_writes else None
        self.executor = ThreadPoolExecutor(max_workers=4)

    async def init(self):
        """Create the document, or reset it if missing or malformed"""
        try:
            await self._run(self._prepare_document)
        except OSError as e:
            logger.error(f"Failed to prepare subscriptions file {self.path}: {e}")
            raise StoreUnavailable(f"Cannot prepare {self.path}: {e}") from e

    async def close(self):
        self.executor.shutdown(wait=True)

    async def ping(self):
        await self._load()

    async def try_insert(self, email: str, ip: Optional[str] = None) -> InsertOutcome:
        if self._lock is None:
            return await self._insert(email, ip)
        async with self._lock:
            return await self._insert(email, ip)

    async def list_all(self) -> List[SubscriberRecord]:
        entries = await self._load()
        try:
            records = [SubscriberRecord(**entry) for entry in entries]
        except ValueError as e:
            logger.error(f"Malformed entry in subscriptions file {self.path}: {e}")
            raise StoreUnavailable() from e
        # newest first; among equal timestamps the later append wins
        return sorted(reversed(records), key=lambda r: r.created_at, reverse=True)

    async def _insert(self, email: str, ip: Optional[str]) -> InsertOutcome:
        entries = await self._load()

        for entry in entries:
            if entry.get("email") == email:
                logger.info(f"Subscriber already present: {email}")
                return InsertOutcome.already_exists()

        record = SubscriberRecord(
            email=email,
            created_at=datetime.now(timezone.utc),
            ip=ip
        )
        entry = {"email": record.email, "created_at": record.created_at.isoformat()}
        if record.ip is not None:
            entry["ip"] = record.ip
        entries.append(entry)

        await self._save(entries)
        logger.info(f"Subscription created: {email}")
        return InsertOutcome.created(record)

    async def _load(self) -> List[Dict[str, Any]]:
        try:
            return await self._run(self._read_entries)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read subscriptions file {self.path}: {e}")
            raise StoreUnavailable() from e

    async def _save(self, entries: List[Dict[str, Any]]):
        try:
            await self._run(self._write_document, {"subscriptions": entries})
        except (OSError, TypeError) as e:
            logger.error(f"Failed to write subscriptions file {self.path}: {e}")
            raise StoreUnavailable() from e

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, func, *args)

    def _prepare_document(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            logger.info(f"Creating subscriptions file {self.path}")
            self._write_document({"subscriptions": []})
            return

        try:
            self._read_entries()
        except ValueError as e:
            logger.warning(f"Subscriptions file {self.path} is invalid ({e}), recreating it empty")
            self._write_document({"subscriptions": []})

    def _read_entries(self) -> List[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return []

        if not isinstance(data, dict) or not isinstance(data.get("subscriptions"), list):
            raise ValueError("expected an object with a 'subscriptions' list")
        if not all(isinstance(entry, dict) for entry in data["subscriptions"]):
            raise ValueError("subscriptions must be objects")
        return data["subscriptions"]

    def _write_document(self, data: Dict[str, Any]):
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
