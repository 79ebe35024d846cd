"""
repositories/cached_repo.py
---------------------------
Read-through cache with a fixed TTL, layered over a remote repository.

Contract:
    - list_all() serves a fresh cached copy when one exists and, when
      `refresh_on_hit` is set, refreshes it in the background. Background
      refresh failures are logged, never raised.
    - Any write goes to the inner repository first and then invalidates
      the cache, so the next read is a real fetch.
"""

import asyncio
import time
from dataclasses import replace
from typing import Any, Callable, Optional

from models.subscription import NewSubscription, Subscription
from repositories.base import SubscriptionRepository
from utils.logger import get_logger

logger = get_logger(__name__)


class CachedSubscriptionRepository:
    """SubscriptionRepository decorator adding a TTL cache to list_all()."""

    def __init__(
        self,
        inner: SubscriptionRepository,
        ttl_seconds: float = 300,
        refresh_on_hit: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.inner = inner
        self.ttl_seconds = ttl_seconds
        self.refresh_on_hit = refresh_on_hit
        self._clock = clock
        self._cached: Optional[list[Subscription]] = None
        self._cached_at: float = 0.0
        self._refresh_task: Optional[asyncio.Task] = None
        self._generation = 0

    def _is_fresh(self) -> bool:
        return self._cached is not None and (self._clock() - self._cached_at) < self.ttl_seconds

    def _store(self, subs: list[Subscription]) -> None:
        self._cached = subs
        self._cached_at = self._clock()

    def invalidate(self) -> None:
        self._cached = None
        self._generation += 1

    async def list_all(self) -> list[Subscription]:
        if self._is_fresh():
            if self.refresh_on_hit and (self._refresh_task is None or self._refresh_task.done()):
                self._refresh_task = asyncio.create_task(self._refresh_in_background())
            return [replace(sub, labels=list(sub.labels)) for sub in self._cached]

        subs = await self.inner.list_all()
        self._store(subs)
        return [replace(sub, labels=list(sub.labels)) for sub in subs]

    async def _refresh_in_background(self) -> None:
        generation = self._generation
        try:
            subs = await self.inner.list_all()
        except Exception as e:
            logger.warning(f"Background cache refresh failed: {e}")
            return
        # a write landed while fetching; the result may predate it
        if generation == self._generation:
            self._store(subs)

    async def wait_for_refresh(self) -> None:
        """Await a pending background refresh, if any."""
        if self._refresh_task is not None:
            await self._refresh_task

    async def create(self, data: NewSubscription, subscription_id: Optional[str] = None) -> Subscription:
        try:
            return await self.inner.create(data, subscription_id)
        finally:
            self.invalidate()

    async def update(self, subscription_id: str, fields: dict[str, Any]) -> None:
        try:
            await self.inner.update(subscription_id, fields)
        finally:
            self.invalidate()

    async def delete(self, subscription_id: str) -> None:
        try:
            await self.inner.delete(subscription_id)
        finally:
            self.invalidate()
