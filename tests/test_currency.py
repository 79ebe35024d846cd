import pytest

from services.currency import (
    EXCHANGE_RATES,
    format_currency,
    format_in_reference,
    to_reference,
)


def test_reference_currency_has_rate_one():
    assert EXCHANGE_RATES["SAR"] == 1.0
    assert to_reference(100, "SAR") == 100


@pytest.mark.parametrize("currency, expected", [
    ("USD", 375.0),
    ("EUR", 410.0),
    ("GBP", 480.0),
    ("CAD", 280.0),
])
def test_to_reference_uses_static_rates(currency, expected):
    assert to_reference(100, currency) == pytest.approx(expected)


def test_unknown_currency_passes_through():
    assert to_reference(12.5, "JPY") == 12.5


def test_format_currency_uses_symbol_and_grouping():
    assert format_currency(1234.5, "USD") == "$ 1,234.50"
    assert format_currency(10, "SAR") == "ر.س 10.00"


def test_format_currency_unknown_code_shows_code():
    assert format_currency(3, "JPY") == "JPY 3.00"


def test_format_in_reference_converts_first():
    assert format_in_reference(10, "USD") == "ر.س 37.50"
