"""Exceptions raised by the readlater package."""

from typing import List, Optional


class ReadLaterError(Exception):
    """Base class for all readlater errors."""


class InvalidBatchError(ReadLaterError, ValueError):
    """A batch was rejected before any record was created."""

    def __init__(self, message: str, invalid_urls: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.invalid_urls = invalid_urls or []


class ItemNotFoundError(ReadLaterError, LookupError):
    """No item with the given id exists for the given owner."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class InvalidTransitionError(ReadLaterError):
    """A status change the item state machine does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move item from {current} to {target}")
        self.current = current
        self.target = target
