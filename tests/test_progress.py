import asyncio

import pytest
from pydantic import ValidationError

from readlater.pipeline import BatchSummary, ProgressChannel, ProgressSnapshot, SnapshotStatus


def _snapshot(completed, total=3, status=SnapshotStatus.SUCCESS):
    return ProgressSnapshot(
        completed=completed,
        total=total,
        url=f"https://example.test/{completed}",
        status=status,
    )


def test_snapshot_rejects_completed_beyond_total():
    with pytest.raises(ValidationError):
        _snapshot(4, total=3)


def test_snapshot_status_serializes_lowercase():
    data = _snapshot(1, total=1, status=SnapshotStatus.FAILED).model_dump(mode="json")
    assert data["status"] == "failed"


def test_summary_folds_snapshots():
    snapshots = [
        _snapshot(1),
        _snapshot(2, status=SnapshotStatus.FAILED),
        _snapshot(3),
    ]
    summary = BatchSummary.from_snapshots(snapshots)

    assert (summary.total, summary.success_count, summary.failed_count) == (3, 2, 1)
    assert not summary.all_succeeded
    assert summary.message() == "Imported 2 URLs and 1 imports failed"


def test_summary_all_succeeded_message():
    summary = BatchSummary.from_snapshots([_snapshot(1), _snapshot(2)])
    assert summary.all_succeeded
    assert summary.message() == "Imported 2 URLs"


def test_channel_delivers_in_send_order():
    async def producer(send):
        for i in range(1, 4):
            await send(_snapshot(i))

    async def runner():
        return await ProgressChannel(3, producer).collect()

    snapshots = asyncio.run(runner())
    assert [s.completed for s in snapshots] == [1, 2, 3]


def test_channel_holds_at_most_one_undelivered_snapshot():
    sent = []

    async def producer(send):
        for i in range(1, 4):
            await send(_snapshot(i))
            sent.append(i)

    async def runner():
        channel = ProgressChannel(3, producer)
        first = await channel.__anext__()
        # Let the producer run as far as it can
        for _ in range(5):
            await asyncio.sleep(0)
        progress_before = list(sent)
        await channel.aclose()
        return first, progress_before

    first, progress_before = asyncio.run(runner())
    assert first.completed == 1
    # Snapshot 2 sits in the queue; snapshot 3 is blocked on it
    assert progress_before == [1, 2]


def test_producer_error_reaches_consumer_after_queued_snapshots():
    async def producer(send):
        await send(_snapshot(1))
        raise RuntimeError("control logic broke")

    async def runner():
        received = []
        channel = ProgressChannel(3, producer)
        with pytest.raises(RuntimeError, match="control logic broke"):
            async for snapshot in channel:
                received.append(snapshot)
        return received

    received = asyncio.run(runner())
    assert [s.completed for s in received] == [1]


def test_producer_starts_on_first_read():
    calls = []

    async def producer(send):
        calls.append("started")
        await send(_snapshot(1, total=1))

    async def runner():
        channel = ProgressChannel(1, producer)
        await asyncio.sleep(0)
        before = list(calls)
        snapshots = await channel.collect()
        return before, snapshots

    before, snapshots = asyncio.run(runner())
    assert before == []
    assert len(snapshots) == 1


def test_leaving_context_early_cancels_producer():
    state = {}

    async def producer(send):
        try:
            await send(_snapshot(1))
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    async def runner():
        async with ProgressChannel(3, producer) as channel:
            async for _ in channel:
                break
        return channel

    channel = asyncio.run(runner())
    assert state == {"cancelled": True}
    assert channel.finished


def test_aclose_before_start_is_harmless():
    async def producer(send):
        raise AssertionError("must not run")

    async def runner():
        channel = ProgressChannel(1, producer)
        await channel.aclose()
        return await channel.collect()

    assert asyncio.run(runner()) == []
