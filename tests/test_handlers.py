from datetime import date, datetime

from handlers.share_handler import share_link
from handlers.subscription_handler import (
    _parse_add,
    _parse_edit,
    _split_sort_and_labels,
    format_subscription,
)
from handlers.workspace import describe_error
from models.exceptions import NotFoundError, TransportError, ValidationError
from repositories.factory import local_store_path


def test_split_sort_and_labels():
    assert _split_sort_and_labels([]) == ("nextPayment-asc", [])
    assert _split_sort_and_labels(["amount-desc", "work,home", "tv"]) == (
        "amount-desc", ["work", "home", "tv"]
    )
    # a hyphenated label is not a sort option
    assert _split_sort_and_labels(["self-care"]) == ("nextPayment-asc", ["self-care"])


def test_parse_add():
    data = _parse_add("Netflix | 45 | SAR | monthly | 2024-07-01 | tv, family")
    assert data == {
        "name": "Netflix",
        "amount": "45",
        "currency": "SAR",
        "frequency": "monthly",
        "next_payment": "2024-07-01",
        "labels": "tv, family",
    }
    assert _parse_add("Netflix | 45") is None


def test_parse_edit():
    fields, unknown = _parse_edit(["amount=55", "renew=no", "next=2024-08-01", "colour=red"])
    assert fields == {"amount": "55", "auto_renewal": False, "next_payment": "2024-08-01"}
    assert unknown == ["colour=red"]


def test_format_subscription_flags_stale_manual_renewal(make_sub):
    sub = make_sub(name="Gym", amount=10, currency="USD", auto_renewal=False,
                   next_payment=date(2024, 6, 10), labels=["health"])
    text = format_subscription(sub, datetime(2024, 6, 15, 9, 0))

    assert "⏸ Gym: $ 10.00 (monthly)" in text
    assert "5 days overdue ⚠️" in text
    assert "ر.س 37.50" in text
    assert "🏷️ health" in text


def test_format_subscription_can_hide_id(make_sub):
    sub = make_sub(id="internal-42")

    assert "🔖 internal-42" in format_subscription(sub, datetime(2024, 6, 15, 9, 0))
    assert "internal-42" not in format_subscription(sub, datetime(2024, 6, 15, 9, 0), include_id=False)


def test_describe_error():
    assert "amount: Amount is required" in describe_error(ValidationError({"amount": "Amount is required"}))
    assert "x1 was not found" in describe_error(NotFoundError("x1"))
    assert "try again" in describe_error(TransportError("boom"))


def test_share_link_without_base_url():
    assert share_link("tok") == "tok"


def test_local_store_path_is_sanitized():
    assert local_store_path("-100123").name == "-100123.json"
    assert local_store_path("../evil").name == "___evil.json"
