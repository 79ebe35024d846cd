"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import pooled_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Workspaces: isolated containers of subscriptions, addressed by an opaque id
CREATE TABLE IF NOT EXISTS workspaces (
    id              TEXT PRIMARY KEY,
    name            VARCHAR(100) NOT NULL DEFAULT 'My Subscriptions',
    sharing_uuid    UUID UNIQUE,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    updated_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Subscriptions: one row per tracked recurring payment, scoped to a workspace
CREATE TABLE IF NOT EXISTS subscriptions (
    id              TEXT NOT NULL,
    workspace_id    TEXT NOT NULL REFERENCES workspaces(id) ON DELETE CASCADE,
    name            VARCHAR(200) NOT NULL,
    amount          NUMERIC(12,2) NOT NULL CHECK (amount > 0 AND amount <= 999999),
    currency        VARCHAR(5) NOT NULL DEFAULT 'SAR',
    frequency       VARCHAR(20) NOT NULL CHECK (frequency IN ('weekly', 'monthly', 'quarterly', 'yearly')),
    next_payment    DATE NOT NULL,
    start_date      DATE,
    url             TEXT,
    icon            TEXT,
    comment         TEXT,
    labels          TEXT[] NOT NULL DEFAULT '{}',
    auto_renewal    BOOLEAN NOT NULL DEFAULT TRUE,
    colors          JSONB,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    PRIMARY KEY (workspace_id, id)
);

-- Read-only projection used by share links (no workspace id exposed)
CREATE OR REPLACE VIEW shared_subscriptions AS
    SELECT s.id, s.name, s.amount, s.currency, s.frequency, s.next_payment,
           s.start_date, s.url, s.icon, s.comment, s.labels, s.auto_renewal,
           s.colors, s.created_at, s.updated_at,
           w.sharing_uuid, w.name AS workspace_name
    FROM subscriptions s
    JOIN workspaces w ON w.id = s.workspace_id
    WHERE w.sharing_uuid IS NOT NULL;

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_subscriptions_next_payment ON subscriptions(workspace_id, next_payment);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    try:
        with pooled_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("✅ Database schema created successfully.")
