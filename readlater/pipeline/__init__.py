"""Bulk ingestion pipeline."""

from .normalize import build_item_content, parse_published_at
from .orchestrator import BatchOrchestrator, is_valid_url, validate_urls
from .outcomes import FailureStage, ItemFailed, ItemOutcome, ItemSucceeded
from .progress import BatchSummary, ProgressChannel, ProgressSnapshot, SnapshotStatus

__all__ = [
    "BatchOrchestrator",
    "BatchSummary",
    "FailureStage",
    "ItemFailed",
    "ItemOutcome",
    "ItemSucceeded",
    "ProgressChannel",
    "ProgressSnapshot",
    "SnapshotStatus",
    "build_item_content",
    "is_valid_url",
    "parse_published_at",
    "validate_urls",
]
