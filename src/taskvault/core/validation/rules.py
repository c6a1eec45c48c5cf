"""
Collection validation: schema parsing followed by integrity rules.

Validation is all-or-nothing. The schema phase walks every field and
raises ``SchemaError`` listing every failure; a schema-clean document then
goes through the integrity rules, which raise ``IntegrityError`` listing
every violation. Callers never receive a partially valid collection.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from taskvault.core.errors import IntegrityError, SchemaError
from taskvault.core.models import Task, TasksCollection
from taskvault.core.validation.checksum import compute_checksum
from taskvault.core.validation.models import Diagnostic
from taskvault.core.validation.schema import parse_collection

logger = logging.getLogger(__name__)


def validate_collection(
    raw: Any,
    *,
    check_integrity: bool = True,
    allow_external_references: bool = False,
    source: Optional[Union[str, Path]] = None,
) -> TasksCollection:
    """
    Parse and validate a raw collection document.

    Args:
        raw: Decoded JSON document
        check_integrity: Run the collection-wide integrity rules (default True)
        allow_external_references: Tolerate dependencies on ids that are not
            in this document, as happens with partition files
        source: File the document came from, used in error messages

    Returns:
        The typed collection

    Raises:
        SchemaError: With every schema diagnostic found
        IntegrityError: With every integrity diagnostic found
    """
    result = parse_collection(raw)
    if not result.ok:
        raise SchemaError(result.diagnostics, source=source)

    collection = result.value
    if check_integrity:
        diagnostics = check_collection_integrity(
            collection, allow_external_references=allow_external_references
        )
        if diagnostics:
            raise IntegrityError(diagnostics, source=source)
    else:
        logger.debug("Integrity checks disabled; skipping for %s", source or "<memory>")
    return collection


def check_collection_integrity(
    collection: TasksCollection,
    allow_external_references: bool = False,
) -> List[Diagnostic]:
    """
    Run every integrity rule and return the combined diagnostics.

    Args:
        collection: Schema-valid collection
        allow_external_references: Skip the dangling-reference rule

    Returns:
        Diagnostics in rule order; empty when the collection is sound
    """
    diagnostics: List[Diagnostic] = []
    _check_duplicate_ids(collection.tasks, diagnostics)
    _check_cycles(collection.tasks, diagnostics)
    if not allow_external_references:
        _check_references(collection.tasks, diagnostics)
    _check_subtasks(collection.tasks, diagnostics)
    _check_subtask_dependency_cycles(collection.tasks, diagnostics)
    _check_metadata(collection, diagnostics)
    return diagnostics


def _task_map(tasks: Iterable[Task]) -> Dict[int, Task]:
    task_map: Dict[int, Task] = {}
    for task in tasks:
        task_map.setdefault(task.id, task)
    return task_map


def find_dependency_cycles(tasks: List[Task]) -> List[List[int]]:
    """
    Find dependency cycles by depth-first traversal.

    Every back-edge to a node on the current traversal stack is reported as
    a closed path, e.g. ``[1, 2, 3, 1]``. Traversal starts from each
    unvisited task in collection order. Dependencies on unknown ids are
    ignored here; they are reported by the reference rule.

    Args:
        tasks: Tasks to inspect

    Returns:
        List of cycle paths, first node repeated at the end
    """
    task_map = _task_map(tasks)
    visited: Set[int] = set()
    on_stack: Set[int] = set()
    cycles: List[List[int]] = []

    for root in tasks:
        if root.id in visited:
            continue
        visited.add(root.id)
        on_stack.add(root.id)
        path = [root.id]
        stack = [(root.id, iter(root.dependencies))]

        while stack:
            node_id, deps = stack[-1]
            dep_id = next(deps, None)
            if dep_id is None:
                stack.pop()
                path.pop()
                on_stack.discard(node_id)
                continue
            if dep_id in on_stack:
                start = path.index(dep_id)
                cycles.append(path[start:] + [dep_id])
                continue
            if dep_id in visited:
                continue
            visited.add(dep_id)
            dep_task = task_map.get(dep_id)
            if dep_task is None:
                continue
            on_stack.add(dep_id)
            path.append(dep_id)
            stack.append((dep_id, iter(dep_task.dependencies)))

    return cycles


def _reaches(task_map: Dict[int, Task], start: int, target: int) -> bool:
    """Whether ``target`` is reachable from ``start`` along task dependencies."""
    seen: Set[int] = set()
    pending = [start]
    while pending:
        current = pending.pop()
        if current == target:
            return True
        if current in seen:
            continue
        seen.add(current)
        task = task_map.get(current)
        if task is not None:
            pending.extend(task.dependencies)
    return False


def _check_duplicate_ids(tasks: List[Task], diagnostics: List[Diagnostic]) -> None:
    seen: Set[int] = set()
    reported: Set[int] = set()
    for index, task in enumerate(tasks):
        if task.id in seen and task.id not in reported:
            reported.add(task.id)
            diagnostics.append(
                Diagnostic(
                    code="DUPLICATE_TASK_ID",
                    message=f"Duplicate task ID found: {task.id}",
                    category="identity",
                    location=f"tasks[{index}].id",
                )
            )
        seen.add(task.id)


def _check_cycles(tasks: List[Task], diagnostics: List[Diagnostic]) -> None:
    for cycle in find_dependency_cycles(tasks):
        diagnostics.append(
            Diagnostic(
                code="CIRCULAR_DEPENDENCY",
                message="Circular dependency detected: " + " -> ".join(str(i) for i in cycle),
                category="dependency",
                location=f"task {cycle[0]}",
            )
        )


def _check_references(tasks: List[Task], diagnostics: List[Diagnostic]) -> None:
    task_ids = {task.id for task in tasks}
    for index, task in enumerate(tasks):
        for dep_id in task.dependencies:
            if dep_id not in task_ids:
                diagnostics.append(
                    Diagnostic(
                        code="MISSING_DEPENDENCY_TARGET",
                        message=f"Task {task.id} depends on non-existent task {dep_id}",
                        category="dependency",
                        location=f"tasks[{index}].dependencies",
                    )
                )
        for sub_index, subtask in enumerate(task.subtasks):
            for dep_id in subtask.dependencies:
                if dep_id not in task_ids:
                    diagnostics.append(
                        Diagnostic(
                            code="MISSING_DEPENDENCY_TARGET",
                            message=f"Subtask {task.id}.{subtask.id} depends on non-existent task {dep_id}",
                            category="dependency",
                            location=f"tasks[{index}].subtasks[{sub_index}].dependencies",
                        )
                    )


def _check_subtasks(tasks: List[Task], diagnostics: List[Diagnostic]) -> None:
    for index, task in enumerate(tasks):
        sibling_ids: Set[int] = set()
        for sub_index, subtask in enumerate(task.subtasks):
            location = f"tasks[{index}].subtasks[{sub_index}]"
            if subtask.id in sibling_ids:
                diagnostics.append(
                    Diagnostic(
                        code="DUPLICATE_SUBTASK_ID",
                        message=f"Duplicate subtask ID {subtask.id} in task {task.id}",
                        category="subtask",
                        location=f"{location}.id",
                    )
                )
            sibling_ids.add(subtask.id)

            if subtask.parent_task_id != task.id:
                diagnostics.append(
                    Diagnostic(
                        code="PARENT_MISMATCH",
                        message=(
                            f"Subtask {subtask.id} has incorrect parentTaskId "
                            f"({subtask.parent_task_id}, should be {task.id})"
                        ),
                        category="subtask",
                        location=f"{location}.parentTaskId",
                    )
                )


def _check_subtask_dependency_cycles(tasks: List[Task], diagnostics: List[Diagnostic]) -> None:
    task_map = _task_map(tasks)
    for index, task in enumerate(tasks):
        for sub_index, subtask in enumerate(task.subtasks):
            for dep_id in subtask.dependencies:
                if dep_id not in task_map:
                    continue
                if dep_id == task.id:
                    message = f"Subtask {task.id}.{subtask.id} depends on its own parent task {task.id}"
                elif _reaches(task_map, dep_id, task.id):
                    message = (
                        f"Subtask {task.id}.{subtask.id} depends on task {dep_id}, "
                        f"which itself depends on parent task {task.id}"
                    )
                else:
                    continue
                diagnostics.append(
                    Diagnostic(
                        code="SUBTASK_DEPENDENCY_CYCLE",
                        message=message,
                        category="dependency",
                        location=f"tasks[{index}].subtasks[{sub_index}].dependencies",
                    )
                )


def _check_metadata(collection: TasksCollection, diagnostics: List[Diagnostic]) -> None:
    metadata = collection.metadata
    actual = len(collection.tasks)
    if metadata.total_tasks != actual:
        diagnostics.append(
            Diagnostic(
                code="TOTAL_TASKS_MISMATCH",
                message=(
                    f"Metadata totalTasks ({metadata.total_tasks}) doesn't match "
                    f"actual tasks count ({actual})"
                ),
                category="metadata",
                location="metadata.totalTasks",
            )
        )

    if metadata.checksum:
        if compute_checksum(collection.tasks) != metadata.checksum:
            diagnostics.append(
                Diagnostic(
                    code="CHECKSUM_MISMATCH",
                    message="Checksum verification failed - data may be corrupted",
                    category="metadata",
                    location="metadata.checksum",
                )
            )
