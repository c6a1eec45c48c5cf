"""Status state machine for tasks and subtasks."""

from typing import List, Union

from taskvault.core.errors import StatusTransitionRejected
from taskvault.core.models import TaskStatus
from taskvault.core.validation.constants import STATUS_TRANSITIONS

StatusLike = Union[TaskStatus, str]


def _coerce(status: StatusLike) -> TaskStatus:
    return status if isinstance(status, TaskStatus) else TaskStatus(status)


def allowed_transitions(status: StatusLike) -> List[str]:
    """Return the statuses reachable from ``status`` in one move.

    Unknown statuses have no legal moves.
    """
    try:
        current = _coerce(status)
    except ValueError:
        return []
    return [target.value for target in STATUS_TRANSITIONS.get(current, ())]


def validate_status_transition(current: StatusLike, new: StatusLike) -> bool:
    """Check whether moving from ``current`` to ``new`` is legal.

    Pure predicate: never raises and never mutates anything. Unknown
    statuses and same-status "moves" are rejected.
    """
    try:
        target = _coerce(new)
    except ValueError:
        return False
    return target.value in allowed_transitions(current)


def require_status_transition(current: StatusLike, new: StatusLike) -> None:
    """Raise ``StatusTransitionRejected`` unless the move is legal."""
    if not validate_status_transition(current, new):
        current_value = current.value if isinstance(current, TaskStatus) else str(current)
        new_value = new.value if isinstance(new, TaskStatus) else str(new)
        raise StatusTransitionRejected(current_value, new_value, allowed_transitions(current))
