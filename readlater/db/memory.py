"""In-process item repository."""

from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..exceptions import ItemNotFoundError
from ..models import ItemContent, ItemStatus, SavedItem, ensure_transition
from .items import ItemRepository, new_item_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryItemRepository(ItemRepository):
    """Dictionary-backed repository with the same contract as Postgres.

    Stored items are never handed out directly; callers get copies, so an
    update is visible all at once or not at all.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._items: Dict[str, SavedItem] = {}
        self._clock = clock

    def _owned(self, item_id: str, owner_id: str) -> SavedItem:
        item = self._items.get(item_id)
        if item is None or item.user_id != owner_id:
            raise ItemNotFoundError(item_id)
        return item

    def _transition(self, item_id: str, owner_id: str, target: ItemStatus, **fields) -> SavedItem:
        current = self._owned(item_id, owner_id)
        ensure_transition(current.status, target)
        updated = current.model_copy(
            update={**fields, "status": target, "updated_at": self._clock()}
        )
        self._items[item_id] = updated
        return updated.model_copy()

    async def create(
        self,
        url: str,
        owner_id: str,
        status: ItemStatus = ItemStatus.PENDING,
    ) -> SavedItem:
        now = self._clock()
        item = SavedItem(
            id=new_item_id(),
            user_id=owner_id,
            url=url,
            status=status,
            created_at=now,
            updated_at=now,
        )
        self._items[item.id] = item
        return item.model_copy()

    async def update_on_success(
        self,
        item_id: str,
        owner_id: str,
        content: ItemContent,
    ) -> SavedItem:
        return self._transition(item_id, owner_id, ItemStatus.COMPLETED, **content.model_dump())

    async def update_on_failure(self, item_id: str, owner_id: str) -> SavedItem:
        return self._transition(item_id, owner_id, ItemStatus.FAILED)

    async def get(self, item_id: str, owner_id: str) -> SavedItem:
        return self._owned(item_id, owner_id).model_copy()

    async def list_items(
        self,
        owner_id: str,
        status: Optional[ItemStatus] = None,
        query: Optional[str] = None,
    ) -> List[SavedItem]:
        needle = query.lower() if query else None
        items = []
        for item in self._items.values():
            if item.user_id != owner_id:
                continue
            if status is not None and item.status != ItemStatus(status):
                continue
            if needle and not (
                (item.title and needle in item.title.lower()) or query in (item.tags or [])
            ):
                continue
            items.append(item.model_copy())
        # Newer insertions first among equal timestamps
        return sorted(reversed(items), key=lambda i: i.created_at, reverse=True)

    async def fail_stale(self, owner_id: str, before: datetime) -> List[SavedItem]:
        stale = [
            item
            for item in self._items.values()
            if item.user_id == owner_id and not item.status.is_terminal and item.created_at < before
        ]
        return [self._transition(item.id, owner_id, ItemStatus.FAILED) for item in stale]
