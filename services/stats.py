"""
services/stats.py
-----------------
Aggregate spending figures in the reference currency.

The caller decides which collection to pass (all subscriptions, or
the label-filtered subset).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from models.subscription import Subscription
from services.currency import to_reference
from services.recurrence import current_time, month_bounds, resolve_next_occurrence, start_of_day

# Per-cycle amount -> per-month amount
MONTHLY_MULTIPLIERS: dict[str, float] = {
    "weekly": 4.33,  # average weeks per month
    "monthly": 1.0,
    "quarterly": 1 / 3,
    "yearly": 1 / 12,
}


@dataclass(frozen=True)
class DashboardStats:
    count: int
    monthly_total: float
    yearly_total: float
    due_this_month: float
    due_rest_of_month: float


def monthly_equivalent(sub: Subscription) -> float:
    """Monthly run-rate of one subscription, converted after scaling."""
    monthly = sub.amount * MONTHLY_MULTIPLIERS.get(sub.frequency, 1.0)
    return to_reference(monthly, sub.currency)


def total_monthly(subs: Iterable[Subscription]) -> float:
    return sum((monthly_equivalent(sub) for sub in subs), 0.0)


def total_yearly(subs: Iterable[Subscription]) -> float:
    return total_monthly(subs) * 12


def due_this_month(subs: Iterable[Subscription], now: Optional[datetime] = None) -> float:
    """
    Sum of concrete payments whose resolved next occurrence lands in the
    calendar month of `now`. Amounts are per-cycle, not monthly-equivalent.
    """
    current = current_time(now)
    start, end = month_bounds(current)
    total = 0.0
    for sub in subs:
        due = start_of_day(resolve_next_occurrence(sub.next_payment, sub.frequency, current))
        if start <= due <= end:
            total += to_reference(sub.amount, sub.currency)
    return total


def due_rest_of_month(subs: Iterable[Subscription], now: Optional[datetime] = None) -> float:
    """Payments still expected between now and the end of the month (raw stored dates)."""
    current = current_time(now)
    _, end = month_bounds(current)
    today = current.replace(hour=0, minute=0, second=0, microsecond=0)
    return sum(
        (to_reference(sub.amount, sub.currency) for sub in subs
         if today <= start_of_day(sub.next_payment) <= end),
        0.0,
    )


def compute_stats(subs: Iterable[Subscription], now: Optional[datetime] = None) -> DashboardStats:
    items = list(subs)
    current = current_time(now)
    monthly = total_monthly(items)
    return DashboardStats(
        count=len(items),
        monthly_total=monthly,
        yearly_total=monthly * 12,
        due_this_month=due_this_month(items, current),
        due_rest_of_month=due_rest_of_month(items, current),
    )
