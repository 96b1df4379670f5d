"""Database management for saved items."""

from .connection import close_connection_pool, get_connection, get_connection_pool
from .init import init_database, validate_connection
from .items import ItemRepository, PostgresItemRepository
from .memory import InMemoryItemRepository

__all__ = [
    "ItemRepository",
    "PostgresItemRepository",
    "InMemoryItemRepository",
    "close_connection_pool",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
