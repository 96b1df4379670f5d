"""Progress reporting between a running batch and its consumer.

A batch reports through a ``ProgressChannel``: a single-producer,
single-consumer async stream holding at most one undelivered snapshot. The
producer starts on the consumer's first read and the stream ends after one
snapshot per input URL. A channel runs once; reprocessing needs a new batch.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

_CLOSED = object()


class SnapshotStatus(str, Enum):
    """Outcome of the single item a snapshot describes."""

    SUCCESS = "success"
    FAILED = "failed"


class ProgressSnapshot(BaseModel):
    """One resolved item of a batch."""

    completed: int = Field(..., ge=1, description="Items resolved so far, including this one")
    total: int = Field(..., ge=1, description="Batch size")
    url: str = Field(..., description="URL just resolved")
    status: SnapshotStatus = Field(..., description="This item's outcome")
    item_id: Optional[str] = Field(None, description="Saved item id, if one was created")
    error: Optional[str] = Field(None, description="Failure cause for failed items")

    @model_validator(mode="after")
    def check_bounds(self) -> "ProgressSnapshot":
        if self.completed > self.total:
            raise ValueError(f"completed ({self.completed}) exceeds total ({self.total})")
        return self


class BatchSummary(BaseModel):
    """Aggregate counts folded from a batch's snapshots."""

    total: int = 0
    success_count: int = 0
    failed_count: int = 0

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[ProgressSnapshot]) -> "BatchSummary":
        summary = cls()
        for snapshot in snapshots:
            summary.total += 1
            if snapshot.status == SnapshotStatus.SUCCESS:
                summary.success_count += 1
            else:
                summary.failed_count += 1
        return summary

    @property
    def all_succeeded(self) -> bool:
        return self.failed_count == 0

    def message(self) -> str:
        if self.failed_count:
            return (
                f"Imported {self.success_count} URLs and "
                f"{self.failed_count} imports failed"
            )
        return f"Imported {self.success_count} URLs"


Send = Callable[[ProgressSnapshot], Awaitable[None]]
Producer = Callable[[Send], Awaitable[None]]


class ProgressChannel:
    """Finite, ordered, cancellable stream of progress snapshots.

    Usage::

        async with orchestrator.run_batch(urls, owner_id) as channel:
            async for snapshot in channel:
                ...

    Leaving the ``async with`` block early (or calling ``aclose``) cancels the
    work still in flight.
    """

    def __init__(self, total: int, producer: Producer, maxsize: int = 1) -> None:
        self.total = total
        self._producer = producer
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None
        self._error: Optional[BaseException] = None
        self._finished = False

    @property
    def started(self) -> bool:
        return self._task is not None

    @property
    def finished(self) -> bool:
        return self._finished

    async def _send(self, snapshot: ProgressSnapshot) -> None:
        await self._queue.put(snapshot)

    async def _run(self) -> None:
        try:
            await self._producer(self._send)
        except Exception as exc:
            logger.error("Batch aborted: %s", exc)
            self._error = exc
        await self._queue.put(_CLOSED)

    def __aiter__(self) -> "ProgressChannel":
        return self

    async def __anext__(self) -> ProgressSnapshot:
        if self._finished:
            raise StopAsyncIteration
        if self._task is None:
            self._task = asyncio.create_task(self._run())

        item = await self._queue.get()
        if item is _CLOSED:
            self._finished = True
            await self._task
            if self._error is not None:
                raise self._error
            raise StopAsyncIteration
        return item

    async def collect(self) -> List[ProgressSnapshot]:
        """Drain the channel."""
        return [snapshot async for snapshot in self]

    async def aclose(self) -> None:
        """Stop the stream and cancel in-flight work."""
        self._finished = True
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.debug("Batch cancelled by consumer")

    async def __aenter__(self) -> "ProgressChannel":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
