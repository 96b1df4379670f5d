"""Batch orchestrator: drives URLs through create, extract and persist."""

import asyncio
import logging
from typing import List, Optional, Sequence

from pydantic import HttpUrl, TypeAdapter, ValidationError

from ..config import Config
from ..db import ItemRepository, PostgresItemRepository
from ..exceptions import InvalidBatchError
from ..extraction import (
    ExtractionClient,
    ExtractionError,
    ExtractionOutcome,
    FirecrawlClient,
    TrafilaturaClient,
)
from ..models import ItemStatus, SavedItem
from .normalize import build_item_content
from .outcomes import FailureStage, ItemFailed, ItemOutcome, ItemSucceeded
from .progress import ProgressChannel, ProgressSnapshot, Send, SnapshotStatus

logger = logging.getLogger(__name__)

_URL_ADAPTER = TypeAdapter(HttpUrl)


def is_valid_url(url: object) -> bool:
    """Check that url is a well-formed absolute http(s) URL."""
    if not isinstance(url, str) or url != url.strip():
        return False
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError:
        return False
    return True


def validate_urls(urls: Sequence[str]) -> List[str]:
    """Validate a batch up front; nothing is created if any URL is bad."""
    if isinstance(urls, str):
        raise InvalidBatchError("Expected a sequence of URLs, got a single string")

    urls = list(urls)
    if not urls:
        raise InvalidBatchError("At least one URL is required")

    invalid = [url for url in urls if not is_valid_url(url)]
    if invalid:
        raise InvalidBatchError(
            f"Invalid URL(s): {', '.join(map(str, invalid))}",
            invalid_urls=[str(url) for url in invalid],
        )
    return urls


def to_snapshot(completed: int, total: int, outcome: ItemOutcome) -> ProgressSnapshot:
    """Describe one resolved item."""
    if isinstance(outcome, ItemSucceeded):
        return ProgressSnapshot(
            completed=completed,
            total=total,
            url=outcome.url,
            status=SnapshotStatus.SUCCESS,
            item_id=outcome.item.id,
        )
    return ProgressSnapshot(
        completed=completed,
        total=total,
        url=outcome.url,
        status=SnapshotStatus.FAILED,
        item_id=outcome.item_id,
        error=outcome.error,
    )


class BatchOrchestrator:
    """Ingest batches of URLs with per-item failure isolation."""

    def __init__(
        self,
        repository: ItemRepository,
        extractor: ExtractionClient,
        concurrency: int = 1,
        item_timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            repository: Durable store for saved items
            extractor: Content extraction backend
            concurrency: Items processed at once; snapshots stay in input order
            item_timeout: Upper bound in seconds for one extraction call
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.repository = repository
        self.extractor = extractor
        self.concurrency = concurrency
        self.item_timeout = item_timeout

    @classmethod
    def from_config(cls, config: Config, concurrency: Optional[int] = None) -> "BatchOrchestrator":
        """Build an orchestrator backed by Postgres and the configured extractor."""
        ingestion = config.config.ingestion
        return cls(
            repository=PostgresItemRepository(config.get_db_config()),
            extractor=cls._get_extractor(config),
            concurrency=concurrency or ingestion.concurrency,
            item_timeout=ingestion.item_timeout,
        )

    @staticmethod
    def _get_extractor(config: Config) -> ExtractionClient:
        """Get configured extraction backend."""
        extraction = config.get_extraction_config()

        if extraction.get("provider") == "firecrawl":
            api_key = extraction.get("api_key")
            if api_key:
                return FirecrawlClient(
                    api_key=api_key,
                    base_url=extraction["base_url"],
                    timeout=extraction["timeout"],
                    country=extraction["country"],
                    languages=extraction["languages"],
                    only_main_content=extraction["only_main_content"],
                    proxy=extraction["proxy"],
                )
            logger.warning("No Firecrawl API key found. Using local trafilatura extraction.")

        return TrafilaturaClient(
            timeout=extraction["timeout"],
            user_agent=extraction["user_agent"],
        )

    def run_batch(self, urls: Sequence[str], owner_id: str) -> ProgressChannel:
        """
        Start ingesting a batch.

        Validation happens immediately; a rejected batch creates no records.
        Work starts when the returned channel is first read, and the channel
        yields exactly one snapshot per URL, in input order.

        Raises:
            InvalidBatchError: empty batch, malformed URL or missing owner
        """
        urls = validate_urls(urls)
        if not owner_id:
            raise InvalidBatchError("An owner id is required")

        total = len(urls)
        logger.info("Starting batch of %d URL(s) for %s", total, owner_id)

        async def produce(send: Send) -> None:
            if self.concurrency == 1:
                for completed, url in enumerate(urls, start=1):
                    outcome = await self.process_item(url, owner_id)
                    await send(to_snapshot(completed, total, outcome))
            else:
                await self._produce_pooled(urls, owner_id, send)
            logger.info("Finished batch of %d URL(s)", total)

        return ProgressChannel(total, produce)

    async def _produce_pooled(self, urls: List[str], owner_id: str, send: Send) -> None:
        """Process with a bounded pool but emit in input order."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def process_with_semaphore(url: str) -> ItemOutcome:
            async with semaphore:
                return await self.process_item(url, owner_id)

        tasks = [asyncio.create_task(process_with_semaphore(url)) for url in urls]
        try:
            for completed, task in enumerate(tasks, start=1):
                outcome = await task
                await send(to_snapshot(completed, len(urls), outcome))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def import_url(self, url: str, owner_id: str) -> ItemOutcome:
        """
        Import a single URL.

        The record is created as PROCESSING. Unlike a batch there is nothing
        to protect, so a failure to create the record propagates.
        """
        validate_urls([url])
        if not owner_id:
            raise InvalidBatchError("An owner id is required")

        item = await self.repository.create(url, owner_id, status=ItemStatus.PROCESSING)
        return await self._resolve(item, owner_id)

    async def process_item(self, url: str, owner_id: str) -> ItemOutcome:
        """Create, extract and persist one URL. Never raises."""
        try:
            item = await self.repository.create(url, owner_id)
        except Exception as e:
            logger.error("Could not create item for %s: %s", url, e)
            return ItemFailed(url=url, stage=FailureStage.CREATE, error=str(e), recorded=False)

        return await self._resolve(item, owner_id)

    async def _resolve(self, item: SavedItem, owner_id: str) -> ItemOutcome:
        """Drive an existing item to COMPLETED or FAILED."""
        url = item.url

        try:
            result = await self._extract(url)
        except Exception as e:
            result = ExtractionError(url=url, error=f"Unexpected error: {e}")

        if isinstance(result, ExtractionError):
            logger.warning("Extraction failed for %s: %s", url, result.error)
            return await self._fail(item, owner_id, FailureStage.EXTRACT, result.error)

        try:
            content = build_item_content(result)
            updated = await self.repository.update_on_success(item.id, owner_id, content)
        except Exception as e:
            logger.error("Could not store content for %s: %s", url, e)
            return await self._fail(item, owner_id, FailureStage.UPDATE, str(e))

        logger.debug("Imported %s as %s", url, updated.id)
        return ItemSucceeded(url=url, item=updated)

    async def _extract(self, url: str) -> ExtractionOutcome:
        if self.item_timeout is None:
            return await self.extractor.extract(url)
        try:
            return await asyncio.wait_for(self.extractor.extract(url), self.item_timeout)
        except asyncio.TimeoutError:
            return ExtractionError(url=url, error=f"Timed out after {self.item_timeout:g}s")

    async def _fail(
        self,
        item: SavedItem,
        owner_id: str,
        stage: FailureStage,
        error: str,
    ) -> ItemFailed:
        """Best-effort FAILED write; the outcome is failed either way."""
        try:
            failed = await self.repository.update_on_failure(item.id, owner_id)
        except Exception as e:
            logger.error(
                "Could not mark %s as FAILED, stored status may remain %s: %s",
                item.id,
                item.status.value,
                e,
            )
            return ItemFailed(
                url=item.url, stage=stage, error=error, item_id=item.id, recorded=False
            )
        return ItemFailed(url=item.url, stage=stage, error=error, item_id=item.id, item=failed)

    async def aclose(self) -> None:
        """Close the extractor and the repository."""
        await self.extractor.aclose()
        await self.repository.aclose()
