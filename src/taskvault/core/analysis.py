"""
Task utilities and collection housekeeping.

Read-only helpers (id allocation, readiness, statistics, analysis) operate
on in-memory tasks. ``archive_completed`` is the one operation here that
writes, and it goes through ``CollectionStore`` like every other writer.
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from taskvault.config import EngineConfig
from taskvault.core.errors import IntegrityError
from taskvault.core.models import Task, TaskStatus, TasksCollection
from taskvault.core.partition import dedupe_tasks
from taskvault.core.storage import CollectionStore, empty_collection
from taskvault.core.validation import Diagnostic, estimate_serialized_size, find_dependency_cycles

logger = logging.getLogger(__name__)

ARCHIVE_RECOMMENDATION_RATIO = 0.5


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _lowest_unused_id(used: Set[int]) -> int:
    candidate = 1
    while candidate in used:
        candidate += 1
    return candidate


def next_task_id(tasks: Sequence[Task]) -> int:
    """Lowest positive id not used by any task."""
    return _lowest_unused_id({task.id for task in tasks})


def next_subtask_id(task: Task) -> int:
    """Lowest positive id not used by any of ``task``'s subtasks."""
    return _lowest_unused_id({subtask.id for subtask in task.subtasks})


def ready_tasks(tasks: Sequence[Task]) -> List[Task]:
    """Pending tasks whose dependencies are all done.

    A dependency on an unknown id counts as not done.
    """
    status_by_id = {task.id: task.status for task in tasks}
    return [
        task
        for task in tasks
        if task.status == TaskStatus.PENDING
        and all(status_by_id.get(dep_id) == TaskStatus.DONE for dep_id in task.dependencies)
    ]


def completion_percentage(tasks: Sequence[Task]) -> int:
    if not tasks:
        return 0
    done = sum(1 for task in tasks if task.status == TaskStatus.DONE)
    return int(_round_half_up(done / len(tasks) * 100))


def task_statistics(tasks: Sequence[Task]) -> Dict[str, Any]:
    """
    Summarize a task list.

    Returns:
        Dict with ``total``, ``by_status``, ``by_priority``,
        ``completion_percentage`` and ``average_subtasks`` (one decimal)
    """
    by_status: Dict[str, int] = {}
    by_priority: Dict[str, int] = {}
    total_subtasks = 0
    for task in tasks:
        by_status[task.status.value] = by_status.get(task.status.value, 0) + 1
        by_priority[task.priority.value] = by_priority.get(task.priority.value, 0) + 1
        total_subtasks += len(task.subtasks)

    average = _round_half_up(total_subtasks / len(tasks), 1) if tasks else 0.0
    return {
        "total": len(tasks),
        "by_status": by_status,
        "by_priority": by_priority,
        "completion_percentage": completion_percentage(tasks),
        "average_subtasks": average,
    }


@dataclass
class CollectionAnalysis:
    """Housekeeping report for one collection."""

    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    estimated_size_bytes: int = 0
    tasks_with_many_subtasks: int = 0
    duplicate_task_ids: List[int] = field(default_factory=list)
    orphaned_subtasks: int = 0
    circular_dependencies: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def analyze_collection(
    collection: TasksCollection, config: Optional[EngineConfig] = None
) -> CollectionAnalysis:
    """
    Look for housekeeping opportunities in a collection.

    Works on collections loaded with integrity checks disabled too, which
    is where duplicate ids and orphaned subtasks can actually show up.
    """
    config = config or EngineConfig()
    tasks = collection.tasks
    report = CollectionAnalysis(total_tasks=len(tasks))
    report.completed_tasks = sum(1 for task in tasks if task.status == TaskStatus.DONE)
    report.pending_tasks = sum(1 for task in tasks if task.status == TaskStatus.PENDING)
    report.estimated_size_bytes = estimate_serialized_size(collection)
    report.tasks_with_many_subtasks = sum(
        1 for task in tasks if len(task.subtasks) > config.max_subtasks_per_task
    )

    seen: Set[int] = set()
    for task in tasks:
        if task.id in seen and task.id not in report.duplicate_task_ids:
            report.duplicate_task_ids.append(task.id)
        seen.add(task.id)
        report.orphaned_subtasks += sum(
            1 for subtask in task.subtasks if subtask.parent_task_id != task.id
        )

    report.circular_dependencies = [
        " -> ".join(str(task_id) for task_id in cycle) for cycle in find_dependency_cycles(tasks)
    ]

    recs = report.recommendations
    if report.total_tasks > config.max_tasks_per_file:
        recs.append(
            f"Task count ({report.total_tasks}) exceeds {config.max_tasks_per_file}. "
            "Consider splitting into multiple files."
        )
    if report.estimated_size_bytes > config.max_file_size_bytes:
        recs.append(
            f"File size is very large (>{config.max_file_size_bytes // 1024}KB). "
            "Consider splitting into multiple files."
        )
    if report.completed_tasks > report.total_tasks * ARCHIVE_RECOMMENDATION_RATIO:
        recs.append("Many tasks are completed. Consider archiving them to reduce file size.")
    if report.tasks_with_many_subtasks:
        recs.append(
            f"{report.tasks_with_many_subtasks} tasks have >{config.max_subtasks_per_task} "
            "subtasks. Consider breaking them down."
        )
    if report.duplicate_task_ids:
        recs.append(
            f"{len(report.duplicate_task_ids)} duplicate task IDs found. These need to be resolved."
        )
    if report.orphaned_subtasks:
        recs.append(
            f"{report.orphaned_subtasks} orphaned subtasks found. These need to be fixed."
        )
    if report.circular_dependencies:
        recs.append(f"{len(report.circular_dependencies)} circular dependencies detected.")
    return report


@dataclass
class ArchiveResult:
    archived_ids: List[int] = field(default_factory=list)
    remaining_tasks: int = 0
    archive_total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def archive_completed(
    store: CollectionStore,
    path: Union[str, Path],
    archive_path: Union[str, Path],
) -> ArchiveResult:
    """
    Move ``done`` tasks from ``path`` into the archive collection.

    The archive is created if missing, otherwise the tasks are appended to
    it, resolving ids already archived the same way a merge does. The archive is saved
    before the source so a failure never loses tasks.

    Raises:
        IntegrityError: If a task that stays behind depends on one that
            would be archived. Nothing is written in that case.
        CollectionIOError: If either file cannot be read or written
    """
    path = Path(path)
    archive_path = Path(archive_path)
    collection = store.load(path)

    done = [task for task in collection.tasks if task.status == TaskStatus.DONE]
    if not done:
        logger.info("No completed tasks to archive in %s", path)
        return ArchiveResult(remaining_tasks=len(collection.tasks))

    done_ids = {task.id for task in done}
    remaining = [task for task in collection.tasks if task.id not in done_ids]

    blocking: List[Diagnostic] = []
    for task in remaining:
        for dep_id in task.dependencies:
            if dep_id in done_ids:
                blocking.append(
                    Diagnostic(
                        code="ARCHIVE_WOULD_ORPHAN",
                        message=f"Task {task.id} depends on completed task {dep_id}",
                        category="dependency",
                        location=f"task {task.id}",
                    )
                )
        for subtask in task.subtasks:
            for dep_id in subtask.dependencies:
                if dep_id in done_ids:
                    blocking.append(
                        Diagnostic(
                            code="ARCHIVE_WOULD_ORPHAN",
                            message=(
                                f"Subtask {task.id}.{subtask.id} depends on completed task {dep_id}"
                            ),
                            category="dependency",
                            location=f"task {task.id}",
                        )
                    )
    if blocking:
        raise IntegrityError(blocking, source=path)

    if archive_path.exists():
        archive = store.read(archive_path, allow_external_references=True)
    else:
        archive = empty_collection(f"{collection.metadata.project_name} - Archive")
    archive.tasks = dedupe_tasks(archive.tasks + done)
    saved_archive = store.save(archive_path, archive, allow_external_references=True)

    collection.tasks = remaining
    store.save(path, collection)

    logger.info("Archived %d completed task(s) from %s to %s", len(done), path, archive_path)
    return ArchiveResult(
        archived_ids=sorted(done_ids),
        remaining_tasks=len(remaining),
        archive_total=len(saved_archive.tasks),
    )
