"""Data models for the save-for-later library."""

from .saved_item import ItemContent, SavedItem
from .status import ItemStatus, can_transition, ensure_transition, sources_for

__all__ = [
    "ItemContent",
    "ItemStatus",
    "SavedItem",
    "can_transition",
    "ensure_transition",
    "sources_for",
]
