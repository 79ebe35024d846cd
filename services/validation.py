"""
services/validation.py
----------------------
Validation boundary between untrusted input and the domain model.

Form input (create/update) is checked field by field and rejected with
a ValidationError before anything is written. Import records go through
`parse_record`, which either returns a typed Subscription or raises an
ImportRecordError; nothing past this module handles raw dicts.
"""

import math
from datetime import date
from typing import Any

from config import REFERENCE_CURRENCY
from models.exceptions import ImportRecordError, ValidationError
from models.subscription import (
    FREQUENCIES,
    MAX_AMOUNT,
    NewSubscription,
    Subscription,
    dedupe_labels,
    parse_date,
)
from services.currency import SUPPORTED_CURRENCIES

_EDITABLE_FIELDS = (
    "name", "amount", "currency", "frequency", "next_payment", "start_date",
    "auto_renewal", "labels", "url", "icon", "comment", "colors",
)

_RECORD_TYPES: dict[str, tuple[type, ...]] = {
    "id": (str,),
    "name": (str,),
    "amount": (int, float),
    "currency": (str,),
    "frequency": (str,),
    "nextPayment": (str,),
    "labels": (list,),
    "autoRenewal": (bool,),
    "createdAt": (str,),
    "updatedAt": (str,),
}


def _clean_amount(value: Any) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("Amount is required")
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValueError("Amount must be a number") from None
    if not math.isfinite(amount):
        raise ValueError("Amount must be a number")
    # stored as NUMERIC(12,2)
    amount = round(amount, 2)
    if amount <= 0:
        raise ValueError("Amount must be greater than 0")
    if amount > MAX_AMOUNT:
        raise ValueError(f"Amount must not exceed {MAX_AMOUNT:,.0f}")
    return amount


def _clean_date(value: Any, label: str) -> date:
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValueError(f"{label} is required")
    try:
        return parse_date(str(value).strip())
    except ValueError:
        raise ValueError(f"{label} must be a date in YYYY-MM-DD format") from None


def _clean_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_field(name: str, value: Any) -> Any:
    """Validate and normalize one editable field. Raises ValueError."""
    if name == "name":
        text = str(value).strip() if value is not None else ""
        if not text:
            raise ValueError("Subscription name is required")
        return text
    if name == "amount":
        return _clean_amount(value)
    if name == "currency":
        code = str(value or "").strip().upper()
        if code not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Currency must be one of {', '.join(SUPPORTED_CURRENCIES)}")
        return code
    if name == "frequency":
        freq = str(value or "").strip().lower()
        if freq not in FREQUENCIES:
            raise ValueError(f"Frequency must be one of {', '.join(FREQUENCIES)}")
        return freq
    if name == "next_payment":
        return _clean_date(value, "Next payment date")
    if name == "start_date":
        return None if value in (None, "") else _clean_date(value, "Start date")
    if name == "auto_renewal":
        if not isinstance(value, bool):
            raise ValueError("Auto renewal must be true or false")
        return value
    if name == "labels":
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
            raise ValueError("Labels must be a list of text values")
        return dedupe_labels(list(value))
    if name == "colors":
        if value is not None and not isinstance(value, dict):
            raise ValueError("Colors must be a mapping")
        return value
    return _clean_optional_text(value)


def validate_partial(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Validate only the fields present, e.g. for an update.

    Returns:
        The cleaned fields.

    Raises:
        ValidationError: Listing every failing field. Unknown keys fail too.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}
    for name, value in fields.items():
        if name not in _EDITABLE_FIELDS:
            errors[name] = "Unknown or read-only field"
            continue
        try:
            cleaned[name] = _clean_field(name, value)
        except ValueError as e:
            errors[name] = str(e)
    if errors:
        raise ValidationError(errors)
    return cleaned


def validate_form(data: dict[str, Any]) -> NewSubscription:
    """
    Validate a complete create form.

    Args:
        data: Raw form values keyed by NewSubscription attribute names.
              `currency` defaults to the reference currency, `frequency`
              to monthly, `auto_renewal` to True.

    Raises:
        ValidationError: Listing every failing field.
    """
    values = {
        "currency": REFERENCE_CURRENCY,
        "frequency": "monthly",
        "auto_renewal": True,
        "labels": [],
        **{k: v for k, v in data.items() if v is not None},
    }
    for required in ("name", "amount", "next_payment"):
        values.setdefault(required, None)
    cleaned = validate_partial(values)
    return NewSubscription(**cleaned)


def parse_record(raw: Any, index: int) -> Subscription:
    """
    Check one import record and convert it to a Subscription.

    Raises:
        ImportRecordError: If a required key is missing or mistyped,
            the frequency is unknown, or a value breaks a write invariant.
    """
    if not isinstance(raw, dict):
        raise ImportRecordError(index)
    for key, types in _RECORD_TYPES.items():
        value = raw.get(key)
        if not isinstance(value, types):
            raise ImportRecordError(index)
        if key == "amount" and isinstance(value, bool):
            raise ImportRecordError(index)
    if not raw["id"].strip() or raw["frequency"] not in FREQUENCIES:
        raise ImportRecordError(index)
    if not all(isinstance(label, str) for label in raw["labels"]):
        raise ImportRecordError(index)
    try:
        amount = _clean_amount(raw["amount"])
        _clean_date(raw["nextPayment"], "Next payment date")
        if raw.get("startDate"):
            _clean_date(raw["startDate"], "Start date")
        record = Subscription.from_dict(raw)
    except (ValueError, TypeError):
        raise ImportRecordError(index) from None
    record.amount = amount
    record.labels = dedupe_labels(record.labels)
    return record


def validate_record(raw: Any) -> bool:
    """True if `raw` is a structurally valid import record."""
    try:
        parse_record(raw, 0)
    except ImportRecordError:
        return False
    return True
