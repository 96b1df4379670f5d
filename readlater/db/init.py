"""Database initialization and schema management."""

import logging
from typing import Any, Dict

from psycopg.errors import DatabaseError

from .connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
-- Saved items table
CREATE TABLE IF NOT EXISTS saved_items (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    url TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'PENDING'
        CHECK (status IN ('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED')),
    title TEXT,
    content TEXT,
    original_image TEXT,
    author TEXT,
    published_at TIMESTAMPTZ,
    summary TEXT,
    tags TEXT[],
    created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_saved_items_user_created
    ON saved_items(user_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_saved_items_user_status
    ON saved_items(user_id, status);

-- Update trigger function
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
    NEW.updated_at = CURRENT_TIMESTAMP;
    RETURN NEW;
END;
$$ language 'plpgsql';

CREATE OR REPLACE TRIGGER update_saved_items_updated_at BEFORE UPDATE ON saved_items
    FOR EACH ROW EXECUTE FUNCTION update_updated_at_column();
"""


async def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        async with get_connection(config) as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1 AS ok")
                result = await cur.fetchone()
                return result is not None and result["ok"] == 1
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False


async def init_database(config: Dict[str, Any]) -> None:
    """Initialize database schema."""
    try:
        async with get_connection(config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(SCHEMA_SQL)
            await conn.commit()
            logger.info("Database schema initialized successfully")
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
