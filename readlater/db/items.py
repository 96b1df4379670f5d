"""Saved item storage."""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from psycopg import AsyncConnection

from ..exceptions import InvalidTransitionError, ItemNotFoundError
from ..models import ItemContent, ItemStatus, SavedItem, sources_for
from .connection import close_connection_pool, get_connection


class ItemRepository(ABC):
    """Durable store for saved items.

    Every operation is scoped to an owner. Touching an id the owner does not
    hold raises ItemNotFoundError; a status change the state machine forbids
    raises InvalidTransitionError. Updates are atomic: readers see either the
    previous row or the fully updated one.
    """

    @abstractmethod
    async def create(
        self,
        url: str,
        owner_id: str,
        status: ItemStatus = ItemStatus.PENDING,
    ) -> SavedItem:
        """Create a new item with no content."""

    @abstractmethod
    async def update_on_success(
        self,
        item_id: str,
        owner_id: str,
        content: ItemContent,
    ) -> SavedItem:
        """Store extracted content and mark the item COMPLETED."""

    @abstractmethod
    async def update_on_failure(self, item_id: str, owner_id: str) -> SavedItem:
        """Mark the item FAILED, leaving content fields untouched (null)."""

    @abstractmethod
    async def get(self, item_id: str, owner_id: str) -> SavedItem:
        """Get one item."""

    @abstractmethod
    async def list_items(
        self,
        owner_id: str,
        status: Optional[ItemStatus] = None,
        query: Optional[str] = None,
    ) -> List[SavedItem]:
        """List an owner's items, newest first."""

    @abstractmethod
    async def fail_stale(self, owner_id: str, before: datetime) -> List[SavedItem]:
        """Mark unresolved items created before ``before`` as FAILED."""

    async def aclose(self) -> None:
        """Release pooled resources."""


def new_item_id() -> str:
    """Generate an opaque item id."""
    return str(uuid.uuid4())


def build_list_query(
    owner_id: str,
    status: Optional[ItemStatus] = None,
    query: Optional[str] = None,
) -> Tuple[str, List[Any]]:
    """Build the SELECT for list_items."""
    sql = "SELECT * FROM saved_items WHERE user_id = %s"
    params: List[Any] = [owner_id]

    if status is not None:
        sql += " AND status = %s"
        params.append(ItemStatus(status).value)

    if query:
        sql += " AND (title ILIKE %s OR %s = ANY(tags))"
        params.extend([f"%{query}%", query])

    sql += " ORDER BY created_at DESC"
    return sql, params


class PostgresItemRepository(ItemRepository):
    """Saved items stored in Postgres."""

    def __init__(self, db_config: Dict[str, Any]) -> None:
        """Initialize repository with a postgres config dict."""
        self.db_config = db_config

    async def create(
        self,
        url: str,
        owner_id: str,
        status: ItemStatus = ItemStatus.PENDING,
    ) -> SavedItem:
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    INSERT INTO saved_items (id, user_id, url, status)
                    VALUES (%s, %s, %s, %s)
                    RETURNING *
                    """,
                    (new_item_id(), owner_id, url, ItemStatus(status).value),
                )
                row = await cur.fetchone()
            await conn.commit()
        return SavedItem.model_validate(row)

    async def update_on_success(
        self,
        item_id: str,
        owner_id: str,
        content: ItemContent,
    ) -> SavedItem:
        allowed = [s.value for s in sources_for(ItemStatus.COMPLETED)]
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE saved_items
                    SET
                        title = %s,
                        content = %s,
                        original_image = %s,
                        author = %s,
                        published_at = %s,
                        status = %s
                    WHERE id = %s AND user_id = %s AND status = ANY(%s)
                    RETURNING *
                    """,
                    (
                        content.title,
                        content.content,
                        content.original_image,
                        content.author,
                        content.published_at,
                        ItemStatus.COMPLETED.value,
                        item_id,
                        owner_id,
                        allowed,
                    ),
                )
                row = await cur.fetchone()
                if row is None:
                    await self._raise_guard_miss(conn, item_id, owner_id, ItemStatus.COMPLETED)
            await conn.commit()
        return SavedItem.model_validate(row)

    async def update_on_failure(self, item_id: str, owner_id: str) -> SavedItem:
        allowed = [s.value for s in sources_for(ItemStatus.FAILED)]
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE saved_items
                    SET status = %s
                    WHERE id = %s AND user_id = %s AND status = ANY(%s)
                    RETURNING *
                    """,
                    (ItemStatus.FAILED.value, item_id, owner_id, allowed),
                )
                row = await cur.fetchone()
                if row is None:
                    await self._raise_guard_miss(conn, item_id, owner_id, ItemStatus.FAILED)
            await conn.commit()
        return SavedItem.model_validate(row)

    async def _raise_guard_miss(
        self,
        conn: AsyncConnection,
        item_id: str,
        owner_id: str,
        target: ItemStatus,
    ) -> None:
        """Explain why a guarded UPDATE touched no row."""
        await conn.rollback()
        async with conn.cursor() as cur:
            await cur.execute(
                "SELECT status FROM saved_items WHERE id = %s AND user_id = %s",
                (item_id, owner_id),
            )
            existing = await cur.fetchone()
        if existing is None:
            raise ItemNotFoundError(item_id)
        raise InvalidTransitionError(existing["status"], target.value)

    async def get(self, item_id: str, owner_id: str) -> SavedItem:
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    "SELECT * FROM saved_items WHERE id = %s AND user_id = %s",
                    (item_id, owner_id),
                )
                row = await cur.fetchone()
        if row is None:
            raise ItemNotFoundError(item_id)
        return SavedItem.model_validate(row)

    async def list_items(
        self,
        owner_id: str,
        status: Optional[ItemStatus] = None,
        query: Optional[str] = None,
    ) -> List[SavedItem]:
        sql, params = build_list_query(owner_id, status, query)
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, params)
                rows = await cur.fetchall()
        return [SavedItem.model_validate(row) for row in rows]

    async def fail_stale(self, owner_id: str, before: datetime) -> List[SavedItem]:
        unresolved = [s.value for s in ItemStatus if not s.is_terminal]
        async with get_connection(self.db_config) as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE saved_items
                    SET status = %s
                    WHERE user_id = %s AND status = ANY(%s) AND created_at < %s
                    RETURNING *
                    """,
                    (ItemStatus.FAILED.value, owner_id, unresolved, before),
                )
                rows = await cur.fetchall()
            await conn.commit()
        return [SavedItem.model_validate(row) for row in rows]

    async def aclose(self) -> None:
        await close_connection_pool()
