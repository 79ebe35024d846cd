"""
repositories/subscription_repo.py
---------------------------------
Hosted storage for subscriptions in PostgreSQL.
All SQL queries related to the `subscriptions` table live here.

Each public coroutine runs its statement in a worker thread on a
pooled connection (see db/queries.py).
"""

import uuid
from typing import Any, Optional

from psycopg2.extras import Json

from db.queries import execute, fetch_all, fetch_one, run_query
from models.exceptions import NotFoundError
from models.subscription import NewSubscription, Subscription
from utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS = (
    "id, name, amount, currency, frequency, next_payment, start_date, url, icon, "
    "comment, labels, auto_renewal, colors, created_at, updated_at"
)

# attribute names match column names
_UPDATABLE_COLUMNS = frozenset({
    "name", "amount", "currency", "frequency", "next_payment", "start_date",
    "url", "icon", "comment", "labels", "auto_renewal", "colors",
})


class PostgresSubscriptionRepository:
    """SubscriptionRepository for one workspace, stored in PostgreSQL."""

    def __init__(self, workspace_id: str, ensure_workspace=None):
        """
        Args:
            workspace_id: Scope of every query issued by this instance.
            ensure_workspace: Optional coroutine function awaited before the
                first insert, creating the workspace row on demand.
        """
        self.workspace_id = workspace_id
        self._ensure_workspace = ensure_workspace

    # ── READ ──────────────────────────────────────────────

    async def list_all(self) -> list[Subscription]:
        """Get all subscriptions in the workspace, newest first."""
        sql = f"SELECT {COLUMNS} FROM subscriptions WHERE workspace_id = %s ORDER BY created_at DESC;"
        rows = await run_query(fetch_all, sql, (self.workspace_id,), action="list subscriptions")
        return [row_to_subscription(r) for r in rows]

    # ── CREATE ────────────────────────────────────────────

    async def create(self, data: NewSubscription, subscription_id: Optional[str] = None) -> Subscription:
        """
        Insert a new subscription.

        Args:
            data: Validated editable fields.
            subscription_id: Keep this id instead of generating one (import).

        Returns:
            The stored Subscription with id and timestamps populated.
        """
        if self._ensure_workspace is not None:
            await self._ensure_workspace()

        new_id = subscription_id or str(uuid.uuid4())
        sql = f"""
            INSERT INTO subscriptions
                (id, workspace_id, name, amount, currency, frequency, next_payment, start_date,
                 url, icon, comment, labels, auto_renewal, colors)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING {COLUMNS};
        """
        params = (
            new_id, self.workspace_id, data.name, data.amount, data.currency,
            data.frequency, data.next_payment, data.start_date, data.url, data.icon,
            data.comment, list(data.labels),
            True if data.auto_renewal is None else data.auto_renewal,
            Json(data.colors) if data.colors is not None else None,
        )
        row = await run_query(fetch_one, sql, params, action=f"add subscription '{data.name}'")
        sub = row_to_subscription(row)
        logger.info(f"Added subscription '{sub.name}' #{sub.id} to workspace {self.workspace_id}")
        return sub

    # ── UPDATE ────────────────────────────────────────────

    async def update(self, subscription_id: str, fields: dict[str, Any]) -> None:
        """
        Merge the given fields into a subscription; always refreshes updated_at.

        Raises:
            NotFoundError: If no such subscription exists in the workspace.
        """
        assignments = []
        params: list = []
        for attr, value in fields.items():
            if attr not in _UPDATABLE_COLUMNS:
                continue
            assignments.append(f"{attr} = %s")
            params.append(Json(value) if attr == "colors" and value is not None else value)
        assignments.append("updated_at = NOW()")

        sql = f"UPDATE subscriptions SET {', '.join(assignments)} WHERE id = %s AND workspace_id = %s;"
        params.extend([subscription_id, self.workspace_id])
        count = await run_query(execute, sql, tuple(params), action=f"update subscription #{subscription_id}")
        if count == 0:
            raise NotFoundError(subscription_id)
        logger.info(f"Updated subscription #{subscription_id}: {sorted(fields)}")

    # ── DELETE ────────────────────────────────────────────

    async def delete(self, subscription_id: str) -> None:
        """
        Delete a subscription by ID, scoped to the workspace.

        Raises:
            NotFoundError: If no such subscription exists in the workspace.
        """
        sql = "DELETE FROM subscriptions WHERE id = %s AND workspace_id = %s;"
        count = await run_query(
            execute, sql, (subscription_id, self.workspace_id),
            action=f"delete subscription #{subscription_id}",
        )
        if count == 0:
            raise NotFoundError(subscription_id)
        logger.info(f"Deleted subscription #{subscription_id}")


def row_to_subscription(row: tuple) -> Subscription:
    """Convert a database row (in COLUMNS order) to a Subscription domain object."""
    return Subscription(
        id=row[0],
        name=row[1],
        amount=float(row[2]),
        currency=row[3],
        frequency=row[4],
        next_payment=row[5],
        start_date=row[6],
        url=row[7],
        icon=row[8],
        comment=row[9],
        labels=list(row[10] or []),
        auto_renewal=row[11],
        colors=row[12],
        created_at=row[13],
        updated_at=row[14],
    )
