"""
services/currency.py
--------------------
Static currency normalization into the reference currency (SAR).
Pure functions: unknown codes pass through at rate 1 instead of failing.
"""

from config import REFERENCE_CURRENCY

# Units of the reference currency per one unit of the given currency
EXCHANGE_RATES: dict[str, float] = {
    "SAR": 1.0,
    "USD": 3.75,
    "EUR": 4.1,
    "GBP": 4.8,
    "CAD": 2.8,
}

CURRENCY_SYMBOLS: dict[str, str] = {
    "SAR": "ر.س",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
}

SUPPORTED_CURRENCIES: tuple[str, ...] = tuple(EXCHANGE_RATES)


def to_reference(amount: float, currency: str) -> float:
    """
    Convert an amount into the reference currency.

    Args:
        amount: Amount expressed in `currency`.
        currency: Currency code; unknown codes use rate 1.

    Returns:
        The amount in REFERENCE_CURRENCY.
    """
    return amount * EXCHANGE_RATES.get(currency, 1.0)


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_currency(amount: float, currency: str = REFERENCE_CURRENCY) -> str:
    """Render e.g. '$ 1,234.50'."""
    return f"{currency_symbol(currency)} {amount:,.2f}"


def format_in_reference(amount: float, currency: str) -> str:
    return format_currency(to_reference(amount, currency), REFERENCE_CURRENCY)
