"""
services/recurrence.py
----------------------
Recurrence engine: steps payment dates through billing cycles.

A stored payment date stands for midnight at the start of that day.
Every function that depends on the current time takes an optional
`now` so callers (and tests) can pin the clock.
"""

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from models.subscription import FREQUENCIES, Subscription

_STEPS: dict[str, relativedelta] = {
    "weekly": relativedelta(days=7),
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "yearly": relativedelta(years=1),
}

_ONE_DAY_SECONDS = 24 * 60 * 60


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def current_time(now: Optional[datetime] = None) -> datetime:
    return now if now is not None else datetime.now()


def advance(day: date, frequency: str) -> date:
    """
    Add exactly one billing cycle to a date.

    Month and year steps use calendar arithmetic and clamp to the last
    valid day of the target month (Jan 31 + 1 month -> Feb 28/29).

    Raises:
        ValueError: If `frequency` is not one of FREQUENCIES.
    """
    try:
        step = _STEPS[frequency]
    except KeyError:
        raise ValueError(f"Unknown frequency {frequency!r}, expected one of {FREQUENCIES}") from None
    return day + step


def is_overdue(day: date, now: Optional[datetime] = None) -> bool:
    """True iff the start of `day` is strictly before now."""
    return start_of_day(day) < current_time(now)


def resolve_next_occurrence(day: date, frequency: str, now: Optional[datetime] = None) -> date:
    """
    Return `day` unchanged if it is still in the future, otherwise the
    first occurrence after now reached by stepping whole cycles from it.
    """
    current = current_time(now)
    resolved = day
    while start_of_day(resolved) <= current:
        stepped = advance(resolved, frequency)
        if stepped <= resolved:
            raise ValueError(f"Frequency {frequency!r} does not move the date forward")
        resolved = stepped
    return resolved


def days_until(day: date, now: Optional[datetime] = None) -> int:
    """Whole-day difference from now to the start of `day`, rounded up."""
    delta = start_of_day(day) - current_time(now)
    return math.ceil(delta.total_seconds() / _ONE_DAY_SECONDS)


def format_due_label(day: date, now: Optional[datetime] = None) -> str:
    """Human label such as 'Due in 3 days' or '2 days overdue'."""
    diff = days_until(day, now)
    if diff < 0:
        return f"{abs(diff)} days overdue"
    if diff == 0:
        return "Due today"
    if diff == 1:
        return "Due tomorrow"
    return f"Due in {diff} days"


def needs_rollover(sub: Subscription, now: Optional[datetime] = None) -> Optional[date]:
    """
    The date an auto-renewing subscription should be moved to, or None
    when it is up to date or does not auto-renew.
    """
    if not sub.auto_renewal:
        return None
    resolved = resolve_next_occurrence(sub.next_payment, sub.frequency, now)
    return resolved if resolved != sub.next_payment else None


@dataclass(frozen=True)
class CalendarEntry:
    name: str
    amount: float
    currency: str


def payment_dates_for_month(
    subs: Iterable[Subscription], year: int, month: int, now: Optional[datetime] = None
) -> dict[str, list[CalendarEntry]]:
    """
    Bucket subscriptions by their resolved next payment, for one calendar month.

    Args:
        subs: Subscriptions to place on the calendar.
        year: Calendar year.
        month: Month number (1-12).

    Returns:
        Mapping of 'YYYY-MM-DD' to the payments landing on that day, ordered by day.
    """
    buckets: dict[str, list[CalendarEntry]] = defaultdict(list)
    for sub in subs:
        due = resolve_next_occurrence(sub.next_payment, sub.frequency, now)
        if due.year == year and due.month == month:
            buckets[due.isoformat()].append(CalendarEntry(sub.name, sub.amount, sub.currency))
    return dict(sorted(buckets.items()))


def month_bounds(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Start (00:00:00) and end (23:59:59.999999) of the month containing now."""
    current = current_time(now)
    start = datetime(current.year, current.month, 1)
    end = start + relativedelta(months=1) - timedelta(microseconds=1)
    return start, end
