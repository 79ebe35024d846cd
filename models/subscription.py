"""
models/subscription.py
----------------------
Domain model for tracked subscriptions (recurring payments).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from dateutil.parser import isoparse

FREQUENCIES: tuple[str, ...] = ("weekly", "monthly", "quarterly", "yearly")

MAX_AMOUNT: float = 999_999


@dataclass
class NewSubscription:
    """
    The user-editable fields of a subscription, before storage assigns
    an identity and timestamps.

    Attributes:
        name: Display name (e.g., 'Netflix').
        amount: Payment amount per cycle, in `currency`.
        currency: Currency code from the supported set.
        frequency: One of FREQUENCIES.
        next_payment: Next (or, if overdue and not renewing, stale) due date.
        start_date: Informational only, never used in date math.
        auto_renewal: Whether overdue dates roll forward automatically.
        labels: Ordered, de-duplicated free-text tags.
        url, icon, comment, colors: Opaque enrichment fields.
    """
    name: str
    amount: float
    currency: str
    frequency: str
    next_payment: date
    start_date: Optional[date] = None
    auto_renewal: bool = True
    labels: list[str] = field(default_factory=list)
    url: Optional[str] = None
    icon: Optional[str] = None
    comment: Optional[str] = None
    colors: Optional[dict[str, str]] = None


@dataclass
class Subscription(NewSubscription):
    """A stored subscription. `id` is unique within its workspace and never reassigned."""
    id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase interchange shape used by export/import."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "currency": self.currency,
            "frequency": self.frequency,
            "nextPayment": self.next_payment.isoformat(),
            "labels": list(self.labels),
            "autoRenewal": self.auto_renewal,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if self.start_date is not None:
            data["startDate"] = self.start_date.isoformat()
        for key, value in (("url", self.url), ("icon", self.icon),
                           ("comment", self.comment), ("colors", self.colors)):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subscription":
        """Build from the interchange shape. Assumes the data was already validated."""
        return cls(
            id=data["id"],
            name=data["name"],
            amount=float(data["amount"]),
            currency=data["currency"],
            frequency=data["frequency"],
            next_payment=parse_date(data["nextPayment"]),
            start_date=parse_date(data["startDate"]) if data.get("startDate") else None,
            auto_renewal=data.get("autoRenewal", True),
            labels=list(data.get("labels") or []),
            url=data.get("url"),
            icon=data.get("icon"),
            comment=data.get("comment"),
            colors=data.get("colors"),
            created_at=isoparse(data["createdAt"]) if data.get("createdAt") else None,
            updated_at=isoparse(data["updatedAt"]) if data.get("updatedAt") else None,
        )

    def as_new(self) -> NewSubscription:
        """The editable part of this subscription, e.g. to re-create it elsewhere."""
        return NewSubscription(
            name=self.name,
            amount=self.amount,
            currency=self.currency,
            frequency=self.frequency,
            next_payment=self.next_payment,
            start_date=self.start_date,
            auto_renewal=self.auto_renewal,
            labels=list(self.labels),
            url=self.url,
            icon=self.icon,
            comment=self.comment,
            colors=dict(self.colors) if self.colors else None,
        )

    def __str__(self) -> str:
        status = "🔁" if self.auto_renewal else "⏸"
        return f"{status} {self.name}: {self.amount:.2f} {self.currency} ({self.frequency}) - Next: {self.next_payment}"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def dedupe_labels(labels: list[str]) -> list[str]:
    """Strip labels, drop blanks and repeats, keep first-seen order."""
    seen: dict[str, None] = {}
    for label in labels:
        cleaned = label.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def parse_date(text: str) -> date:
    """
    Parse 'YYYY-MM-DD' or a full ISO datetime, keeping only the date.

    Raises:
        ValueError: For anything else, including trailing text after the date.
    """
    try:
        return date.fromisoformat(text)
    except ValueError:
        if "T" not in text:
            raise
    return isoparse(text).date()
