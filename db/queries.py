"""
db/queries.py
-------------
Small helpers that run one SQL statement on a pooled connection.
The async wrapper moves the blocking psycopg2 call to a worker thread
and turns driver errors into TransportError.
"""

import asyncio
from typing import Any, Callable

import psycopg2

from db.connection import pooled_connection
from models.exceptions import TransportError
from utils.logger import get_logger

logger = get_logger(__name__)


def fetch_all(sql: str, params: tuple) -> list[tuple]:
    with pooled_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, params)
            return cur.fetchall()


def fetch_one(sql: str, params: tuple):
    with pooled_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, params)
            return cur.fetchone()


def execute(sql: str, params: tuple) -> int:
    """Run a write statement and return the affected row count."""
    with pooled_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(sql, params)
            return cur.rowcount


async def run_query(func: Callable[[str, tuple], Any], sql: str, params: tuple, action: str) -> Any:
    """
    Run `func(sql, params)` in a worker thread.

    Args:
        func: One of fetch_all, fetch_one, execute.
        action: Short description used in log and error messages.

    Raises:
        TransportError: Wrapping any psycopg2 error.
    """
    try:
        return await asyncio.to_thread(func, sql, params)
    except psycopg2.Error as e:
        logger.error(f"Failed to {action}: {e}")
        raise TransportError(f"Failed to {action}") from e
