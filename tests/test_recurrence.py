from datetime import date, datetime

import pytest

from services.recurrence import (
    CalendarEntry,
    advance,
    days_until,
    format_due_label,
    is_overdue,
    month_bounds,
    needs_rollover,
    payment_dates_for_month,
    resolve_next_occurrence,
)

NOW = datetime(2024, 6, 15, 10, 30)


@pytest.mark.parametrize("frequency, expected", [
    ("weekly", date(2024, 1, 8)),
    ("monthly", date(2024, 2, 1)),
    ("quarterly", date(2024, 4, 1)),
    ("yearly", date(2025, 1, 1)),
])
def test_advance_adds_one_cycle(frequency, expected):
    assert advance(date(2024, 1, 1), frequency) == expected


def test_advance_clamps_to_end_of_month():
    assert advance(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
    assert advance(date(2023, 1, 31), "monthly") == date(2023, 2, 28)
    assert advance(date(2024, 2, 29), "yearly") == date(2025, 2, 28)


def test_advance_rejects_unknown_frequency():
    with pytest.raises(ValueError):
        advance(date(2024, 1, 1), "daily")


def test_is_overdue_compares_start_of_day():
    assert is_overdue(date(2024, 6, 14), NOW)
    # today's midnight is already past at 10:30
    assert is_overdue(date(2024, 6, 15), NOW)
    assert not is_overdue(date(2024, 6, 16), NOW)


def test_resolve_future_date_is_unchanged():
    assert resolve_next_occurrence(date(2024, 8, 3), "monthly", NOW) == date(2024, 8, 3)


def test_resolve_monthly_from_long_ago():
    assert resolve_next_occurrence(date(2023, 1, 1), "monthly", NOW) == date(2024, 7, 1)


def test_resolve_today_moves_forward():
    assert resolve_next_occurrence(date(2024, 6, 15), "weekly", NOW) == date(2024, 6, 22)


@pytest.mark.parametrize("frequency", ["weekly", "monthly", "quarterly", "yearly"])
def test_resolver_agrees_with_repeated_stepping(frequency):
    start = date(2020, 3, 10)
    stepped = start
    steps = 0
    while datetime.combine(stepped, datetime.min.time()) <= NOW:
        stepped = advance(stepped, frequency)
        steps += 1
    assert steps > 1
    assert resolve_next_occurrence(start, frequency, NOW) == stepped


def test_days_until_rounds_up_partial_days():
    # tomorrow's midnight is 13.5 hours away
    assert days_until(date(2024, 6, 16), NOW) == 1
    assert days_until(date(2024, 6, 15), NOW) == 0
    assert days_until(date(2024, 6, 14), NOW) == -1


@pytest.mark.parametrize("day, label", [
    (date(2024, 6, 13), "2 days overdue"),
    (date(2024, 6, 15), "Due today"),
    (date(2024, 6, 16), "Due tomorrow"),
    (date(2024, 6, 20), "Due in 5 days"),
])
def test_format_due_label(day, label):
    assert format_due_label(day, NOW) == label


def test_needs_rollover_for_auto_renewing(make_sub):
    sub = make_sub(next_payment=date(2023, 1, 1))
    assert needs_rollover(sub, NOW) == date(2024, 7, 1)


def test_needs_rollover_skips_manual_renewal(make_sub):
    sub = make_sub(next_payment=date(2023, 1, 1), auto_renewal=False)
    assert needs_rollover(sub, NOW) is None
    assert is_overdue(sub.next_payment, NOW)


def test_needs_rollover_none_when_current(make_sub):
    assert needs_rollover(make_sub(next_payment=date(2024, 7, 1)), NOW) is None


def test_payment_dates_for_month_buckets_resolved_dates(make_sub):
    subs = [
        make_sub(id="a", name="Gym", next_payment=date(2024, 5, 20)),
        make_sub(id="b", name="Spotify", next_payment=date(2024, 6, 20), amount=22.0),
        make_sub(id="c", name="Domain", next_payment=date(2024, 9, 1), frequency="yearly"),
    ]
    calendar = payment_dates_for_month(subs, 2024, 6, NOW)

    assert list(calendar) == ["2024-06-20"]
    assert calendar["2024-06-20"] == [
        CalendarEntry("Gym", 45.0, "SAR"),
        CalendarEntry("Spotify", 22.0, "SAR"),
    ]


def test_month_bounds_covers_whole_month():
    start, end = month_bounds(NOW)
    assert start == datetime(2024, 6, 1)
    assert end == datetime(2024, 6, 30, 23, 59, 59, 999999)
