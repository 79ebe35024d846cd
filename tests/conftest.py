import os
import sys
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("CACHE_TTL_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "x")

from models.exceptions import NotFoundError, TransportError
from models.subscription import Subscription


def build_subscription(**overrides) -> Subscription:
    values = {
        "id": "sub-1",
        "name": "Netflix",
        "amount": 45.0,
        "currency": "SAR",
        "frequency": "monthly",
        "next_payment": date(2024, 7, 1),
        "labels": [],
        "auto_renewal": True,
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Subscription(**values)


@pytest.fixture
def make_sub():
    return build_subscription


class RecordingRepository:
    """In-memory repository that records writes and can fail chosen ids."""

    def __init__(self, subs=(), fail_ids=(), fail_creates=()):
        self.subs = {s.id: s for s in subs}
        self.fail_ids = set(fail_ids)
        self.fail_creates = set(fail_creates)
        self.updates: list[tuple[str, dict]] = []
        self.created: list[tuple[str, object]] = []
        self.list_calls = 0

    async def list_all(self):
        self.list_calls += 1
        return [build_subscription(**{**s.__dict__, "labels": list(s.labels)}) for s in self.subs.values()]

    async def create(self, data, subscription_id=None):
        if data.name in self.fail_creates:
            raise TransportError("disk full")
        new_id = subscription_id or f"new-{len(self.created) + 1}"
        sub = Subscription(**data.__dict__, id=new_id)
        self.subs[new_id] = sub
        self.created.append((new_id, data))
        return sub

    async def update(self, subscription_id, fields):
        self.updates.append((subscription_id, dict(fields)))
        if subscription_id in self.fail_ids:
            raise TransportError("connection reset")
        if subscription_id not in self.subs:
            raise NotFoundError(subscription_id)
        current = self.subs[subscription_id]
        self.subs[subscription_id] = build_subscription(**{**current.__dict__, **fields})

    async def delete(self, subscription_id):
        if self.subs.pop(subscription_id, None) is None:
            raise NotFoundError(subscription_id)


@pytest.fixture
def recording_repo():
    return RecordingRepository
