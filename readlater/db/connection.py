"""Database connection management."""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool


class DatabaseConfig:
    """Database configuration."""

    def __init__(self, config: Dict[str, Any]) -> None:
        """Initialize database config from dict."""
        self.host = config.get("host", "localhost")
        self.port = config.get("port", 5432)
        self.database = config.get("database", "readlater")
        self.user = config.get("user", "readlater")

        # password_env is resolved by Config.get_db_config
        self.password = config.get("password") or ""

    @property
    def connection_string(self) -> str:
        """Get psycopg connection string."""
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "password": self.password,
        }
        return make_conninfo(**{k: v for k, v in params.items() if v not in (None, "")})


_connection_pool: Optional[AsyncConnectionPool] = None


async def get_connection_pool(config: Dict[str, Any]) -> AsyncConnectionPool:
    """Get or create the connection pool."""
    global _connection_pool
    if _connection_pool is None:
        db_config = DatabaseConfig(config)
        _connection_pool = AsyncConnectionPool(
            db_config.connection_string,
            min_size=1,
            max_size=10,
            timeout=30,
            open=False,
            kwargs={"row_factory": dict_row, "connect_timeout": 10},
        )
        await _connection_pool.open()
    return _connection_pool


async def close_connection_pool() -> None:
    """Close the pool; the next get_connection opens a fresh one."""
    global _connection_pool
    if _connection_pool is not None:
        pool, _connection_pool = _connection_pool, None
        await pool.close()


@asynccontextmanager
async def get_connection(
    config: Dict[str, Any],
) -> AsyncGenerator[psycopg.AsyncConnection, None]:
    """Get a database connection from the pool."""
    pool = await get_connection_pool(config)
    async with pool.connection() as conn:
        yield conn
