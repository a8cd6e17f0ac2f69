import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from collabill.models.enums import TaskStatus
from collabill.routes.tasks import apply_status_change
from collabill.workflow import (
    COMMON_TRANSITIONS,
    allowed_transitions,
    can_delete,
    can_transition,
)

ALL = list(TaskStatus)
S = TaskStatus

@pytest.mark.parametrize("status", ALL)
@pytest.mark.parametrize("owner", [True, False])
def test_self_move_always_allowed(status, owner):
    assert can_transition(status, status, owner) is True
    # pure: asking again gives the same answer
    assert can_transition(status, status, owner) is True

@pytest.mark.parametrize("terminal", [S.VALIDATED, S.TRASH])
@pytest.mark.parametrize("owner", [True, False])
def test_terminal_columns_have_no_exit(terminal, owner):
    for target in ALL:
        if target != terminal:
            assert can_transition(terminal, target, owner) is False
    assert allowed_transitions(terminal, owner) == frozenset()

def test_only_owner_leaves_review():
    assert can_transition(S.IN_REVIEW, S.VALIDATED, False) is False
    assert can_transition(S.IN_REVIEW, S.VALIDATED, True) is True
    assert can_transition(S.IN_REVIEW, S.IN_PROGRESS, True) is True
    assert can_transition(S.IN_REVIEW, S.TRASH, True) is True

    # not in the owner's exit set
    assert can_transition(S.IN_REVIEW, S.TODO, True) is False
    assert can_transition(S.IN_REVIEW, S.BLOCKED, True) is False

    for target in ALL:
        if target != S.IN_REVIEW:
            assert can_transition(S.IN_REVIEW, target, False) is False

def test_table_rows():
    assert allowed_transitions(S.TODO, False) == {S.IN_PROGRESS, S.BLOCKED, S.TRASH}
    assert allowed_transitions(S.TODO, True) == {S.IN_PROGRESS, S.BLOCKED, S.TRASH}
    assert allowed_transitions(S.IN_PROGRESS, False) == {S.BLOCKED, S.TRASH, S.TODO, S.IN_REVIEW}
    assert allowed_transitions(S.BLOCKED, True) == {S.TODO, S.TRASH}

def test_review_choices_depend_on_ownership():
    assert allowed_transitions(S.IN_REVIEW, False) == frozenset()
    assert allowed_transitions(S.IN_REVIEW, True) == {S.TRASH, S.IN_PROGRESS, S.VALIDATED}

@pytest.mark.parametrize("source", ALL)
@pytest.mark.parametrize("owner", [True, False])
def test_allowed_matches_can_transition(source, owner):
    expected = {t for t in ALL if t != source and can_transition(source, t, owner)}
    assert allowed_transitions(source, owner) == expected

def test_table_is_read_only():
    assert S.IN_REVIEW not in COMMON_TRANSITIONS

    with pytest.raises(TypeError):
        COMMON_TRANSITIONS[S.TODO] = frozenset({S.VALIDATED})  # type: ignore[index]

    choices = allowed_transitions(S.TODO, True)
    assert isinstance(choices, frozenset)
    assert not hasattr(choices, "add")

def test_can_delete():
    assert can_delete(S.VALIDATED) is False
    assert can_delete(S.IN_REVIEW) is False
    assert can_delete(S.BLOCKED) is True
    assert can_delete(S.TODO) is True
    assert can_delete(S.IN_PROGRESS) is True
    assert can_delete(S.TRASH) is True

def _task(status: TaskStatus, validated_at=None, validated_by=None):
    return SimpleNamespace(status=status, validated_at=validated_at, validated_by=validated_by)

def test_review_scenario_stamps_validation():
    collaborator = uuid.uuid4()
    owner = uuid.uuid4()
    now = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
    task = _task(S.IN_PROGRESS)

    assert can_transition(task.status, S.IN_REVIEW, False)
    apply_status_change(task, S.IN_REVIEW, collaborator, now)
    assert task.status == S.IN_REVIEW
    assert task.validated_at is None and task.validated_by is None

    assert not can_transition(task.status, S.VALIDATED, False)

    assert can_transition(task.status, S.VALIDATED, True)
    apply_status_change(task, S.VALIDATED, owner, now)
    assert task.status == S.VALIDATED
    assert task.validated_at == now
    assert task.validated_by == owner

def test_leaving_validated_clears_stamp():
    task = _task(S.VALIDATED, datetime.now(timezone.utc), uuid.uuid4())

    apply_status_change(task, S.IN_PROGRESS, uuid.uuid4(), datetime.now(timezone.utc))

    assert task.status == S.IN_PROGRESS
    assert task.validated_at is None
    assert task.validated_by is None
