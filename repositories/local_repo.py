"""
repositories/local_repo.py
--------------------------
Offline-first storage: one JSON document per workspace on local disk.
Passing `path=None` keeps everything in memory (useful for tests and
throwaway sessions).
"""

import asyncio
import json
import uuid
from dataclasses import asdict, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from models.exceptions import NotFoundError, TransportError
from models.subscription import NewSubscription, Subscription
from utils.logger import get_logger

logger = get_logger(__name__)


class LocalSubscriptionRepository:
    """SubscriptionRepository backed by a local JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._records: Optional[dict[str, Subscription]] = None
        self._lock = asyncio.Lock()

    # ── READ ──────────────────────────────────────────────

    async def list_all(self) -> list[Subscription]:
        """Return all subscriptions, newest first."""
        async with self._lock:
            records = await self._load()
            return sorted(
                (replace(sub, labels=list(sub.labels)) for sub in records.values()),
                key=lambda s: s.created_at or datetime.min.replace(tzinfo=timezone.utc),
                reverse=True,
            )

    # ── CREATE ────────────────────────────────────────────

    async def create(self, data: NewSubscription, subscription_id: Optional[str] = None) -> Subscription:
        """
        Insert a new subscription.

        Args:
            data: Validated editable fields.
            subscription_id: Keep this id instead of generating one (import).

        Returns:
            The stored Subscription.
        """
        async with self._lock:
            records = await self._load()
            new_id = subscription_id or str(uuid.uuid4())
            if new_id in records:
                raise TransportError(f"Subscription id {new_id} already exists")
            now = datetime.now(timezone.utc)
            sub = Subscription(**asdict(data), id=new_id, created_at=now, updated_at=now)
            if sub.auto_renewal is None:
                sub.auto_renewal = True
            records[new_id] = sub
            await self._save(records)
        logger.info(f"Added subscription '{sub.name}' #{sub.id}")
        return replace(sub, labels=list(sub.labels))

    # ── UPDATE ────────────────────────────────────────────

    async def update(self, subscription_id: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            records = await self._load()
            current = records.get(subscription_id)
            if current is None:
                raise NotFoundError(subscription_id)
            changes = {k: v for k, v in fields.items() if k not in ("id", "created_at", "updated_at")}
            records[subscription_id] = replace(
                current, **changes, updated_at=datetime.now(timezone.utc)
            )
            await self._save(records)
        logger.info(f"Updated subscription #{subscription_id}: {sorted(changes)}")

    # ── DELETE ────────────────────────────────────────────

    async def delete(self, subscription_id: str) -> None:
        async with self._lock:
            records = await self._load()
            if records.pop(subscription_id, None) is None:
                raise NotFoundError(subscription_id)
            await self._save(records)
        logger.info(f"Deleted subscription #{subscription_id}")

    # ── HELPERS ───────────────────────────────────────────

    async def _load(self) -> dict[str, Subscription]:
        if self._records is not None:
            return self._records
        if self.path is None or not self.path.exists():
            self._records = {}
            return self._records
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            items = json.loads(raw) if raw.strip() else []
            if not isinstance(items, list):
                raise TypeError(f"expected a list of subscriptions, got {type(items).__name__}")
            records = {item["id"]: Subscription.from_dict(item) for item in items}
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to read local store {self.path}: {e}")
            raise TransportError(f"Could not read {self.path}") from e
        self._records = records
        return self._records

    async def _save(self, records: dict[str, Subscription]) -> None:
        self._records = records
        if self.path is None:
            return
        payload = json.dumps([sub.to_dict() for sub in records.values()], ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(self._write_atomic, payload)
        except OSError as e:
            # Drop the in-memory copy so the next read reflects what is on disk
            self._records = None
            logger.error(f"Failed to write local store {self.path}: {e}")
            raise TransportError(f"Could not write {self.path}") from e

    def _write_atomic(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(self.path)
