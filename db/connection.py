"""
db/connection.py
----------------
Process-wide PostgreSQL pool for the hosted backend.
Repositories borrow connections from worker threads (`asyncio.to_thread`),
hence the thread-safe pool.
"""

from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2 import pool

from config import DATABASE_URL
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.ThreadedConnectionPool | None = None


def init_pool(min_conn: int = 1, max_conn: int = 10, dsn: str = DATABASE_URL) -> None:
    """
    Open the pool once; later calls are no-ops.

    Args:
        min_conn: Connections opened eagerly.
        max_conn: Upper bound, shared by all concurrent queries.
        dsn: Connection string; defaults to the configured DATABASE_URL.

    Raises:
        psycopg2.OperationalError: If the database is unreachable.
    """
    global _pool
    if _pool is not None:
        return
    try:
        _pool = pool.ThreadedConnectionPool(min_conn, max_conn, dsn)
    except psycopg2.OperationalError as e:
        logger.error(f"Could not open database pool: {e}")
        raise
    logger.info(f"Database pool ready ({min_conn}-{max_conn} connections).")


@contextmanager
def pooled_connection() -> Iterator:
    """
    Borrow a connection for one unit of work.
    Commits on success, rolls back and re-raises on any error.

    Raises:
        RuntimeError: If init_pool() was never called.
    """
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")
    conn = _pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        _pool.putconn(conn)


def close_pool() -> None:
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database pool closed.")
