import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from readlater.db import InMemoryItemRepository
from readlater.extraction import ExtractionClient, ExtractionError, ExtractionResult
from readlater.models import ItemStatus
from readlater.pipeline import BatchOrchestrator

OWNER = "user-1"


class ScriptedExtractor(ExtractionClient):
    """Extractor returning canned outcomes per URL.

    A URL without an entry succeeds with a generated title and body. An
    exception instance in ``outcomes`` is raised instead of returned.
    """

    name = "scripted"

    def __init__(
        self,
        outcomes: Optional[Dict[str, object]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.outcomes = outcomes or {}
        self.delays = delays or {}
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def extract(self, url):
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if url in self.delays:
                await asyncio.sleep(self.delays[url])
            outcome = self.outcomes.get(url)
            if isinstance(outcome, BaseException):
                raise outcome
            if outcome is None:
                return ExtractionResult(url=url, title=f"Title of {url}", markdown=f"Body of {url}")
            return outcome
        finally:
            self.in_flight -= 1

    async def aclose(self):
        self.closed = True


def failing(url: str, error: str = "upstream exploded") -> ExtractionError:
    return ExtractionError(url=url, error=error)


class FlakyRepository(InMemoryItemRepository):
    """In-memory repository that can be told to fail specific writes."""

    def __init__(
        self,
        fail_create: Iterable[str] = (),
        fail_success: Iterable[str] = (),
        fail_failure: Iterable[str] = (),
    ) -> None:
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        self._ticks = 0

        def clock() -> datetime:
            self._ticks += 1
            return start + timedelta(seconds=self._ticks)

        super().__init__(clock=clock)
        self.fail_create = set(fail_create)
        self.fail_success = set(fail_success)
        self.fail_failure = set(fail_failure)
        self.created_statuses: List[ItemStatus] = []

    def _url_of(self, item_id: str) -> Optional[str]:
        item = self._items.get(item_id)
        return item.url if item else None

    async def create(self, url, owner_id, status=ItemStatus.PENDING):
        if url in self.fail_create:
            raise RuntimeError("insert failed")
        self.created_statuses.append(ItemStatus(status))
        return await super().create(url, owner_id, status=status)

    async def update_on_success(self, item_id, owner_id, content):
        if self._url_of(item_id) in self.fail_success:
            raise RuntimeError("update failed")
        return await super().update_on_success(item_id, owner_id, content)

    async def update_on_failure(self, item_id, owner_id):
        if self._url_of(item_id) in self.fail_failure:
            raise RuntimeError("failure update failed")
        return await super().update_on_failure(item_id, owner_id)

    def all_items(self):
        return list(self._items.values())

    def items_for(self, url: str):
        return [item for item in self._items.values() if item.url == url]


def collect(orchestrator: BatchOrchestrator, urls, owner_id: str = OWNER):
    async def runner():
        return await orchestrator.run_batch(urls, owner_id).collect()

    return asyncio.run(runner())


@pytest.fixture
def repository() -> FlakyRepository:
    return FlakyRepository()


@pytest.fixture
def extractor() -> ScriptedExtractor:
    return ScriptedExtractor()


@pytest.fixture
def orchestrator(repository, extractor) -> BatchOrchestrator:
    return BatchOrchestrator(repository, extractor)
