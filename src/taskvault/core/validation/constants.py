"""Validation constants for task collections."""

from taskvault.core.models import TaskPriority, TaskStatus

VALID_STATUSES = {status.value for status in TaskStatus}
VALID_PRIORITIES = {priority.value for priority in TaskPriority}

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000

# Soft limits used by check_size_limits
DEFAULT_MAX_TASKS_PER_FILE = 100
DEFAULT_MAX_SUBTASKS_PER_TASK = 20
DEFAULT_MAX_FILE_SIZE_BYTES = 1024 * 1024

# Legal status moves; anything not listed is rejected
STATUS_TRANSITIONS = {
    TaskStatus.PENDING: (
        TaskStatus.IN_PROGRESS,
        TaskStatus.DEFERRED,
        TaskStatus.CANCELLED,
    ),
    TaskStatus.IN_PROGRESS: (
        TaskStatus.REVIEW,
        TaskStatus.DONE,
        TaskStatus.PENDING,
        TaskStatus.DEFERRED,
        TaskStatus.CANCELLED,
    ),
    TaskStatus.REVIEW: (
        TaskStatus.DONE,
        TaskStatus.IN_PROGRESS,
        TaskStatus.PENDING,
    ),
    TaskStatus.DONE: (TaskStatus.REVIEW,),
    TaskStatus.DEFERRED: (TaskStatus.PENDING, TaskStatus.CANCELLED),
    TaskStatus.CANCELLED: (TaskStatus.PENDING,),
}

