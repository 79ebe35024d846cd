"""
services/subscription_service.py
---------------------------------
Business logic for managing subscriptions in one workspace.
"""

import asyncio
import inspect
from datetime import datetime
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from models.subscription import Subscription
from repositories.base import SubscriptionRepository
from services.filtering import DEFAULT_SORT, filter_by_labels, process_subscriptions, unique_labels
from services.recurrence import CalendarEntry, current_time, needs_rollover, payment_dates_for_month
from services.stats import DashboardStats, compute_stats
from services.validation import validate_form, validate_partial
from utils.logger import get_logger

logger = get_logger(__name__)

RefreshCallback = Callable[[], Union[None, Awaitable[None]]]


class SubscriptionService:
    """
    Orchestrates the repository and the pure engines.

    Responsibilities:
        - Validate user input before any write.
        - Roll overdue auto-renewing subscriptions forward on load.
        - Produce filtered/sorted views, dashboard stats and the calendar.
    """

    def __init__(self, repo: SubscriptionRepository):
        self.repo = repo

    # ── READ ──────────────────────────────────────────────

    async def list_subscriptions(
        self,
        labels: Iterable[str] = (),
        sort_option: Optional[str] = DEFAULT_SORT,
        now: Optional[datetime] = None,
    ) -> list[Subscription]:
        """
        Load, roll over, then filter and sort.

        Args:
            labels: Label filter (OR); empty shows everything.
            sort_option: '<key>-<direction>', e.g. 'amount-desc'.
            now: Pinned clock for the rollover pass.
        """
        subs = await self.load(now)
        return process_subscriptions(subs, labels, sort_option)

    async def load(self, now: Optional[datetime] = None) -> list[Subscription]:
        """All subscriptions with the rollover pass applied (re-read if anything moved)."""
        subs = await self.repo.list_all()
        if await self.rollover(subs, now=now):
            subs = await self.repo.list_all()
        return subs

    async def stats(self, labels: Iterable[str] = (), now: Optional[datetime] = None) -> DashboardStats:
        current = current_time(now)
        subs = await self.load(current)
        return compute_stats(filter_by_labels(subs, labels), current)

    async def calendar(self, year: int, month: int,
                       now: Optional[datetime] = None) -> dict[str, list[CalendarEntry]]:
        current = current_time(now)
        subs = await self.load(current)
        return payment_dates_for_month(subs, year, month, current)

    async def labels(self) -> list[str]:
        return unique_labels(await self.repo.list_all())

    # ── WRITE ─────────────────────────────────────────────

    async def create(self, data: dict[str, Any]) -> Subscription:
        """
        Validate a create form and store it.

        Raises:
            ValidationError: Nothing is written.
            TransportError: If the storage backend fails.
        """
        new = validate_form(data)
        sub = await self.repo.create(new)
        logger.info(f"Created subscription '{sub.name}' #{sub.id}")
        return sub

    async def update(self, subscription_id: str, fields: dict[str, Any]) -> None:
        """
        Validate and apply a partial edit.

        Raises:
            ValidationError: Nothing is written.
            NotFoundError: If the id is not in this workspace.
        """
        cleaned = validate_partial(fields)
        await self.repo.update(subscription_id, cleaned)

    async def delete(self, subscription_id: str) -> None:
        await self.repo.delete(subscription_id)

    # ── ROLLOVER ──────────────────────────────────────────

    async def rollover(
        self,
        subs: Iterable[Subscription],
        now: Optional[datetime] = None,
        on_refreshed: Optional[RefreshCallback] = None,
    ) -> int:
        """
        Advance every overdue auto-renewing subscription to its next future date.

        Updates are issued concurrently and awaited together. A failed
        update is logged and does not stop the others. `on_refreshed`
        (sync or async) fires once, after all updates settle, and only
        if at least one succeeded. Running the pass again on the
        refreshed data writes nothing.

        Returns:
            Number of subscriptions successfully moved.
        """
        current = current_time(now)
        pending: list[tuple[Subscription, Any]] = []
        for sub in subs:
            resolved = needs_rollover(sub, current)
            if resolved is not None:
                pending.append((sub, resolved))

        if not pending:
            return 0

        outcomes = await asyncio.gather(
            *(self.repo.update(sub.id, {"next_payment": resolved}) for sub, resolved in pending),
            return_exceptions=True,
        )

        moved = 0
        for (sub, resolved), outcome in zip(pending, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Rollover of '{sub.name}' #{sub.id} to {resolved} failed: {outcome}")
                continue
            moved += 1

        logger.info(f"Rollover moved {moved}/{len(pending)} subscriptions")

        if moved and on_refreshed is not None:
            result = on_refreshed()
            if inspect.isawaitable(result):
                await result
        return moved
