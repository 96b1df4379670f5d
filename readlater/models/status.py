"""Lifecycle states of a saved item and the transitions between them.

An item is created ``PENDING`` (or ``PROCESSING`` for a single-URL import) and
resolves exactly once, to ``COMPLETED`` when extraction succeeded and the
content was stored, or to ``FAILED`` otherwise. Both resolved states are
terminal: nothing in the pipeline moves an item out of them.
"""

from enum import Enum
from typing import Dict, FrozenSet, List

from ..exceptions import InvalidTransitionError


class ItemStatus(str, Enum):
    """Processing status of a saved item."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: FrozenSet[ItemStatus] = frozenset({ItemStatus.COMPLETED, ItemStatus.FAILED})

_TRANSITIONS: Dict[ItemStatus, FrozenSet[ItemStatus]] = {
    ItemStatus.PENDING: frozenset(
        {ItemStatus.PROCESSING, ItemStatus.COMPLETED, ItemStatus.FAILED}
    ),
    ItemStatus.PROCESSING: frozenset({ItemStatus.COMPLETED, ItemStatus.FAILED}),
    ItemStatus.COMPLETED: frozenset(),
    ItemStatus.FAILED: frozenset(),
}


def can_transition(current: ItemStatus, target: ItemStatus) -> bool:
    """Check whether an item in ``current`` may move to ``target``."""
    return ItemStatus(target) in _TRANSITIONS[ItemStatus(current)]


def ensure_transition(current: ItemStatus, target: ItemStatus) -> None:
    """Raise InvalidTransitionError unless ``current`` may move to ``target``."""
    if not can_transition(current, target):
        raise InvalidTransitionError(ItemStatus(current).value, ItemStatus(target).value)


def sources_for(target: ItemStatus) -> List[ItemStatus]:
    """States from which an item may move to ``target``, in declaration order."""
    return [status for status in ItemStatus if ItemStatus(target) in _TRANSITIONS[status]]
