"""Soft size-limit policy for task collections.

Advisory only: the result is surfaced to users but never blocks a save.
"""

import json

from taskvault.core.models import TasksCollection
from taskvault.core.validation.constants import (
    DEFAULT_MAX_FILE_SIZE_BYTES,
    DEFAULT_MAX_SUBTASKS_PER_TASK,
    DEFAULT_MAX_TASKS_PER_FILE,
)
from taskvault.core.validation.models import SizeReport


def estimate_serialized_size(collection: TasksCollection) -> int:
    """Approximate on-disk size in bytes (compact JSON, UTF-8)."""
    return len(
        json.dumps(collection.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    )


def check_size_limits(
    collection: TasksCollection,
    max_tasks_per_file: int = DEFAULT_MAX_TASKS_PER_FILE,
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES,
    max_subtasks_per_task: int = DEFAULT_MAX_SUBTASKS_PER_TASK,
) -> SizeReport:
    """
    Compare a collection against the soft size limits.

    Args:
        collection: Collection to inspect
        max_tasks_per_file: Recommended ceiling on task count
        max_file_size_bytes: Recommended ceiling on serialized size
        max_subtasks_per_task: Subtask count above which a task is flagged

    Returns:
        SizeReport with warnings and matching recommendations
    """
    report = SizeReport(task_count=len(collection.tasks))

    if report.task_count > max_tasks_per_file:
        report.ok = False
        report.warnings.append(
            f"Task count ({report.task_count}) exceeds recommended limit ({max_tasks_per_file})"
        )
        report.recommendations.append(
            "Consider splitting tasks into multiple files"
        )

    report.estimated_size_bytes = estimate_serialized_size(collection)
    if report.estimated_size_bytes > max_file_size_bytes:
        report.ok = False
        report.warnings.append(
            f"Estimated file size ({round(report.estimated_size_bytes / 1024)}KB) exceeds "
            f"recommended limit ({round(max_file_size_bytes / 1024)}KB)"
        )
        report.recommendations.append("Consider chunking the file into partitions")

    crowded = [task.id for task in collection.tasks if len(task.subtasks) > max_subtasks_per_task]
    if crowded:
        report.warnings.append(
            f"{len(crowded)} tasks have more than {max_subtasks_per_task} subtasks"
        )
        report.recommendations.append(
            "Consider breaking down large tasks into smaller, more manageable tasks"
        )

    return report
