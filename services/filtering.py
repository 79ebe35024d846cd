"""
services/filtering.py
---------------------
Label filtering and multi-key sorting of subscription collections.

An empty label selection means "no filter": every subscription is shown.
"""

import locale
from functools import cmp_to_key
from typing import Callable, Iterable

from models.subscription import Subscription
from services.currency import to_reference

SORT_KEYS: tuple[str, ...] = ("nextPayment", "name", "amount")
SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")
DEFAULT_SORT: str = "nextPayment-asc"


def filter_by_labels(subs: Iterable[Subscription], selected_labels: Iterable[str]) -> list[Subscription]:
    """
    Keep subscriptions carrying at least one of the selected labels (OR).

    Returns a new list; with no labels selected, all subscriptions.
    """
    selected = set(selected_labels)
    if not selected:
        return list(subs)
    return [sub for sub in subs if selected.intersection(sub.labels)]


def _compare_names(a: Subscription, b: Subscription) -> int:
    primary = locale.strcoll(a.name.casefold(), b.name.casefold())
    if primary:
        return primary
    return locale.strcoll(a.name, b.name)


def _compare_next_payment(a: Subscription, b: Subscription) -> int:
    return (a.next_payment > b.next_payment) - (a.next_payment < b.next_payment)


def _compare_amount(a: Subscription, b: Subscription) -> int:
    left = to_reference(a.amount, a.currency)
    right = to_reference(b.amount, b.currency)
    return (left > right) - (left < right)


_COMPARATORS: dict[str, Callable[[Subscription, Subscription], int]] = {
    "nextPayment": _compare_next_payment,
    "name": _compare_names,
    "amount": _compare_amount,
}


def sort_subscriptions(subs: Iterable[Subscription], key: str = "nextPayment",
                       direction: str = "asc") -> list[Subscription]:
    """
    Stable sort by next payment (raw stored date), name, or amount in
    the reference currency.

    Raises:
        ValueError: For an unknown key or direction.
    """
    if key not in _COMPARATORS:
        raise ValueError(f"Unknown sort key {key!r}, expected one of {SORT_KEYS}")
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction {direction!r}, expected one of {SORT_DIRECTIONS}")

    compare = _COMPARATORS[key]
    sign = -1 if direction == "desc" else 1
    return sorted(subs, key=cmp_to_key(lambda a, b: sign * compare(a, b)))


def parse_sort_option(option: str | None) -> tuple[str, str]:
    """
    Split a '<key>-<direction>' option such as 'amount-desc'.
    Anything unrecognised falls back to DEFAULT_SORT.
    """
    key, _, direction = (option or "").partition("-")
    if key in SORT_KEYS and direction in SORT_DIRECTIONS:
        return key, direction
    default_key, _, default_direction = DEFAULT_SORT.partition("-")
    return default_key, default_direction


def process_subscriptions(subs: Iterable[Subscription], selected_labels: Iterable[str],
                          sort_option: str | None = DEFAULT_SORT) -> list[Subscription]:
    """Filter by labels, then sort."""
    key, direction = parse_sort_option(sort_option)
    return sort_subscriptions(filter_by_labels(subs, selected_labels), key, direction)


def unique_labels(subs: Iterable[Subscription]) -> list[str]:
    """All distinct labels, sorted."""
    return sorted({label for sub in subs for label in sub.labels})
