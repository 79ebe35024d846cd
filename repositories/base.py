"""
repositories/base.py
--------------------
Storage contracts the services depend on. Every implementation is
scoped to one workspace at construction time and is fully async.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from models.subscription import NewSubscription, Subscription


class SubscriptionRepository(Protocol):
    """Abstract storage for the subscriptions of one workspace."""

    async def list_all(self) -> list[Subscription]:
        ...

    async def create(self, data: NewSubscription, subscription_id: Optional[str] = None) -> Subscription:
        """
        Persist a new subscription. Assigns `id` (unless one is given),
        `created_at` and `updated_at`.
        """
        ...

    async def update(self, subscription_id: str, fields: dict[str, Any]) -> None:
        """
        Merge `fields` into an existing subscription and refresh `updated_at`.

        Raises:
            NotFoundError: If the id does not exist in this workspace.
        """
        ...

    async def delete(self, subscription_id: str) -> None:
        """
        Raises:
            NotFoundError: If the id does not exist in this workspace.
        """
        ...


class SharedSubscriptionReader(Protocol):
    """Read-only projection of a workspace, addressed by its sharing token."""

    async def get_shared_subscriptions(self, sharing_token: str) -> list[Subscription]:
        ...
