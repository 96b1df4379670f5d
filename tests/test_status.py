import pytest

from readlater.exceptions import InvalidTransitionError
from readlater.models import ItemStatus, can_transition, ensure_transition, sources_for

P, R, C, F = (
    ItemStatus.PENDING,
    ItemStatus.PROCESSING,
    ItemStatus.COMPLETED,
    ItemStatus.FAILED,
)


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (P, R, True),
        (P, C, True),
        (P, F, True),
        (R, C, True),
        (R, F, True),
        (R, P, False),
        (C, F, False),
        (F, C, False),
        (C, P, False),
        (F, R, False),
    ],
)
def test_transitions(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_terminal_states():
    assert [s for s in ItemStatus if s.is_terminal] == [C, F]


def test_ensure_transition_raises_for_terminal_item():
    with pytest.raises(InvalidTransitionError) as excinfo:
        ensure_transition(C, F)
    assert (excinfo.value.current, excinfo.value.target) == ("COMPLETED", "FAILED")


def test_sources_for():
    assert sources_for(C) == [P, R]
    assert sources_for(F) == [P, R]
    assert sources_for(R) == [P]
    assert sources_for(P) == []


def test_status_accepts_plain_strings():
    assert can_transition("PENDING", "COMPLETED")
