"""
repositories/factory.py
-----------------------
Binds the SubscriptionRepository contract to a concrete backend,
chosen by STORAGE_BACKEND. Instances are kept per workspace so the
TTL cache survives between requests.
"""

import re
from pathlib import Path

from config import CACHE_TTL_SECONDS, LOCAL_STORE_DIR, STORAGE_BACKEND
from repositories.base import SubscriptionRepository
from repositories.cached_repo import CachedSubscriptionRepository
from repositories.local_repo import LocalSubscriptionRepository
from repositories.subscription_repo import PostgresSubscriptionRepository
from repositories.workspace_repo import WorkspaceRepository
from utils.logger import get_logger

logger = get_logger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")

_repositories: dict[str, SubscriptionRepository] = {}


def uses_hosted_backend() -> bool:
    return STORAGE_BACKEND == "postgres"


def local_store_path(workspace_id: str) -> Path:
    """One JSON document per workspace under LOCAL_STORE_DIR."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", workspace_id)
    return Path(LOCAL_STORE_DIR) / f"{safe_name}.json"


def _build(workspace_id: str) -> SubscriptionRepository:
    if STORAGE_BACKEND == "local":
        return LocalSubscriptionRepository(local_store_path(workspace_id))
    if STORAGE_BACKEND != "postgres":
        raise ValueError(f"Unknown STORAGE_BACKEND {STORAGE_BACKEND!r}, expected 'postgres' or 'local'")

    workspace = WorkspaceRepository(workspace_id)
    repo: SubscriptionRepository = PostgresSubscriptionRepository(
        workspace_id, ensure_workspace=workspace.ensure_workspace
    )
    if CACHE_TTL_SECONDS > 0:
        repo = CachedSubscriptionRepository(repo, ttl_seconds=CACHE_TTL_SECONDS, refresh_on_hit=True)
    return repo


def get_repository(workspace_id: str) -> SubscriptionRepository:
    """The repository for one workspace, created on first use."""
    repo = _repositories.get(workspace_id)
    if repo is None:
        repo = _build(workspace_id)
        _repositories[workspace_id] = repo
        logger.info(f"Opened {STORAGE_BACKEND} repository for workspace {workspace_id}")
    return repo
