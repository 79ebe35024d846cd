"""
repositories/workspace_repo.py
------------------------------
Data access layer for workspaces and their share links.
"""

import uuid
from typing import Optional

from db.queries import execute, fetch_all, fetch_one, run_query
from models.exceptions import TransportError
from models.subscription import Subscription
from repositories.subscription_repo import COLUMNS, row_to_subscription
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_WORKSPACE_NAME = "My Subscriptions"


class WorkspaceRepository:
    """Workspace lifecycle and share-token issuance for one workspace id."""

    def __init__(self, workspace_id: str):
        self.workspace_id = workspace_id

    async def ensure_workspace(self, name: Optional[str] = None) -> None:
        """Create the workspace row if it does not exist yet."""
        sql = """
            INSERT INTO workspaces (id, name) VALUES (%s, %s)
            ON CONFLICT (id) DO NOTHING;
        """
        await run_query(execute, sql, (self.workspace_id, name or DEFAULT_WORKSPACE_NAME),
                        action=f"ensure workspace {self.workspace_id}")

    async def rename(self, name: str) -> None:
        sql = "UPDATE workspaces SET name = %s, updated_at = NOW() WHERE id = %s;"
        await self.ensure_workspace(name)
        await run_query(execute, sql, (name, self.workspace_id), action=f"rename workspace {self.workspace_id}")

    async def get_workspace_name(self) -> str:
        """The workspace name, or the default when unavailable."""
        sql = "SELECT name FROM workspaces WHERE id = %s;"
        try:
            row = await run_query(fetch_one, sql, (self.workspace_id,), action="fetch workspace name")
        except TransportError:
            return DEFAULT_WORKSPACE_NAME
        return row[0] if row else DEFAULT_WORKSPACE_NAME

    async def generate_sharing_token(self) -> str:
        """
        Return the workspace's sharing token, issuing one on first use.
        The token is distinct from the workspace id and stable afterwards.
        """
        await self.ensure_workspace()
        sql = """
            UPDATE workspaces SET sharing_uuid = COALESCE(sharing_uuid, %s), updated_at = NOW()
            WHERE id = %s
            RETURNING sharing_uuid;
        """
        row = await run_query(fetch_one, sql, (str(uuid.uuid4()), self.workspace_id),
                              action="generate sharing token")
        token = str(row[0])
        logger.info(f"Sharing token ready for workspace {self.workspace_id}")
        return token


class SharedSubscriptionRepository:
    """SharedSubscriptionReader over the `shared_subscriptions` view."""

    async def get_shared_subscriptions(self, sharing_token: str) -> list[Subscription]:
        """Read-only list for a share link; unknown or malformed tokens yield []."""
        try:
            uuid.UUID(sharing_token)
        except ValueError:
            return []
        sql = f"SELECT {COLUMNS} FROM shared_subscriptions WHERE sharing_uuid = %s ORDER BY next_payment;"
        rows = await run_query(fetch_all, sql, (sharing_token,), action="fetch shared subscriptions")
        return [row_to_subscription(r) for r in rows]

    async def get_shared_workspace_name(self, sharing_token: str) -> Optional[str]:
        try:
            uuid.UUID(sharing_token)
        except ValueError:
            return None
        sql = "SELECT name FROM workspaces WHERE sharing_uuid = %s;"
        row = await run_query(fetch_one, sql, (sharing_token,), action="fetch shared workspace name")
        return row[0] if row else None

