"""Unit tests for the status state machine."""

import pytest

from taskvault.core.errors import StatusTransitionRejected
from taskvault.core.models import TaskStatus
from taskvault.core.validation import (
    STATUS_TRANSITIONS,
    allowed_transitions,
    require_status_transition,
    validate_status_transition,
)


class TestValidateStatusTransition:
    """Tests for the pure transition predicate."""

    @pytest.mark.parametrize(
        "current,new,expected",
        [
            ("done", "pending", False),
            ("done", "review", True),
            ("pending", "done", False),
            ("pending", "in-progress", True),
            ("in-progress", "done", True),
            ("review", "in-progress", True),
            ("deferred", "pending", True),
            ("deferred", "done", False),
            ("cancelled", "pending", True),
            ("cancelled", "done", False),
        ],
    )
    def test_table(self, current, new, expected):
        assert validate_status_transition(current, new) is expected

    def test_same_status_is_not_a_transition(self):
        for status in TaskStatus:
            assert validate_status_transition(status, status) is False

    def test_unknown_statuses_are_rejected_without_raising(self):
        assert validate_status_transition("bogus", "pending") is False
        assert validate_status_transition("pending", "bogus") is False

    def test_accepts_enum_members(self):
        assert validate_status_transition(TaskStatus.REVIEW, TaskStatus.DONE) is True

    def test_every_status_has_an_entry(self):
        assert set(STATUS_TRANSITIONS) == set(TaskStatus)


class TestAllowedTransitions:
    def test_done_only_reopens_to_review(self):
        assert allowed_transitions("done") == ["review"]

    def test_unknown_status_has_no_moves(self):
        assert allowed_transitions("archived") == []


class TestRequireStatusTransition:
    """Tests for the raising convenience wrapper."""

    def test_legal_move_returns_none(self):
        assert require_status_transition("pending", "in-progress") is None

    def test_illegal_move_raises_with_allowed_targets(self):
        with pytest.raises(StatusTransitionRejected) as exc_info:
            require_status_transition(TaskStatus.DONE, "pending")

        exc = exc_info.value
        assert exc.current == "done"
        assert exc.new == "pending"
        assert exc.allowed == ["review"]
        assert "allowed: review" in str(exc)
