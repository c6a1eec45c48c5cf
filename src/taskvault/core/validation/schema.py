"""
Schema parsing for task collections.

Each record type has an explicit parse function that walks every field,
collects a diagnostic per violation and returns a ``ParseResult``. Nothing
here stops at the first problem; ``parse_collection`` aggregates the
diagnostics of every nested record.
"""

from datetime import datetime
from difflib import get_close_matches
from enum import Enum
from typing import Any, List, Mapping, Optional, Type, TypeVar

from taskvault.core.models import (
    DEFAULT_COLLECTION_VERSION,
    CollectionMetadata,
    Subtask,
    Task,
    TaskPriority,
    TasksCollection,
    TaskStatus,
)
from taskvault.core.validation.constants import (
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from taskvault.core.validation.models import Diagnostic, ParseResult

E = TypeVar("E", bound=Enum)


def _suggest_value(value: str, valid_values: List[str]) -> Optional[str]:
    """Suggest a close match for an invalid enum value."""
    if not value:
        return None
    matches = get_close_matches(value.lower(), valid_values, n=1, cutoff=0.6)
    if matches:
        return f"did you mean '{matches[0]}'?"
    return None


def _is_valid_iso8601(value: str) -> bool:
    """Check if value is a valid ISO 8601 datetime (date-only values are rejected)."""
    if "T" not in value:
        return False
    try:
        if value.endswith("Z"):
            datetime.fromisoformat(value[:-1] + "+00:00")
        else:
            datetime.fromisoformat(value)
        return True
    except ValueError:
        return False


def _child(location: str, key: str) -> str:
    return f"{location}.{key}" if location else key


def _error(diagnostics: List[Diagnostic], code: str, location: str, message: str) -> None:
    diagnostics.append(
        Diagnostic(code=code, message=message, severity="error", category="schema", location=location)
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _positive_int(
    raw: Mapping[str, Any], key: str, location: str, diagnostics: List[Diagnostic]
) -> Optional[int]:
    loc = _child(location, key)
    if key not in raw or raw[key] is None:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", loc, "is required")
        return None
    value = raw[key]
    if not _is_int(value):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected integer, got {type(value).__name__}")
        return None
    if value <= 0:
        _error(diagnostics, "OUT_OF_RANGE", loc, f"must be a positive integer, got {value}")
        return None
    return value


def _text(
    raw: Mapping[str, Any],
    key: str,
    location: str,
    diagnostics: List[Diagnostic],
    max_length: int,
) -> Optional[str]:
    loc = _child(location, key)
    if key not in raw or raw[key] is None:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", loc, "is required")
        return None
    value = raw[key]
    if not isinstance(value, str):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected string, got {type(value).__name__}")
        return None
    value = value.strip()
    if not value:
        _error(diagnostics, "EMPTY_FIELD", loc, "must not be empty")
        return None
    if len(value) > max_length:
        _error(
            diagnostics,
            "FIELD_TOO_LONG",
            loc,
            f"must be at most {max_length} characters, got {len(value)}",
        )
        return None
    return value


def _optional_text(
    raw: Mapping[str, Any], key: str, location: str, diagnostics: List[Diagnostic]
) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        _error(
            diagnostics,
            "INVALID_TYPE",
            _child(location, key),
            f"expected string, got {type(value).__name__}",
        )
        return None
    return value.strip() or None


def _enum(
    raw: Mapping[str, Any],
    key: str,
    enum_cls: Type[E],
    location: str,
    diagnostics: List[Diagnostic],
) -> Optional[E]:
    loc = _child(location, key)
    if key not in raw or raw[key] is None:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", loc, "is required")
        return None
    value = raw[key]
    valid = [member.value for member in enum_cls]
    if isinstance(value, str) and value in valid:
        return enum_cls(value)
    message = f"invalid value {value!r}; expected one of {', '.join(valid)}"
    if isinstance(value, str):
        hint = _suggest_value(value, valid)
        if hint:
            message = f"{message} ({hint})"
    _error(diagnostics, "INVALID_ENUM_VALUE", loc, message)
    return None


def _id_list(
    raw: Mapping[str, Any], key: str, location: str, diagnostics: List[Diagnostic]
) -> List[int]:
    """Parse a dependency list into sorted unique positive ids."""
    loc = _child(location, key)
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected array, got {type(value).__name__}")
        return []
    ids = set()
    for index, item in enumerate(value):
        if not _is_int(item) or item <= 0:
            _error(
                diagnostics,
                "INVALID_DEPENDENCY_ID",
                f"{loc}[{index}]",
                f"must be a positive integer, got {item!r}",
            )
            continue
        ids.add(item)
    return sorted(ids)


def _timestamp(
    raw: Mapping[str, Any],
    key: str,
    location: str,
    diagnostics: List[Diagnostic],
    required: bool = False,
) -> Optional[str]:
    loc = _child(location, key)
    value = raw.get(key)
    if value is None:
        if required:
            _error(diagnostics, "MISSING_REQUIRED_FIELD", loc, "is required")
        return None
    if not isinstance(value, str) or not _is_valid_iso8601(value):
        _error(diagnostics, "INVALID_TIMESTAMP", loc, f"must be an ISO 8601 datetime, got {value!r}")
        return None
    return value


def _positive_number(
    raw: Mapping[str, Any], key: str, location: str, diagnostics: List[Diagnostic]
) -> Optional[float]:
    value = raw.get(key)
    if value is None:
        return None
    loc = _child(location, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected number, got {type(value).__name__}")
        return None
    if value <= 0:
        _error(diagnostics, "OUT_OF_RANGE", loc, f"must be positive, got {value}")
        return None
    return value


def _tags(raw: Mapping[str, Any], location: str, diagnostics: List[Diagnostic]) -> List[str]:
    loc = _child(location, "tags")
    value = raw.get("tags")
    if value is None:
        return []
    if not isinstance(value, list):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected array, got {type(value).__name__}")
        return []
    tags: List[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            _error(diagnostics, "INVALID_TYPE", f"{loc}[{index}]", f"expected string, got {type(item).__name__}")
            continue
        if item not in tags:
            tags.append(item)
    return tags


def _require_mapping(raw: Any, location: str, diagnostics: List[Diagnostic]) -> bool:
    if isinstance(raw, dict):
        return True
    _error(
        diagnostics,
        "INVALID_RECORD",
        location or "<root>",
        f"expected object, got {type(raw).__name__}",
    )
    return False


def parse_subtask(raw: Any, location: str = "subtask") -> ParseResult[Subtask]:
    """Parse one subtask record."""
    diagnostics: List[Diagnostic] = []
    if not _require_mapping(raw, location, diagnostics):
        return ParseResult(diagnostics=diagnostics)

    subtask_id = _positive_int(raw, "id", location, diagnostics)
    title = _text(raw, "title", location, diagnostics, TITLE_MAX_LENGTH)
    description = _text(raw, "description", location, diagnostics, DESCRIPTION_MAX_LENGTH)
    details = _optional_text(raw, "details", location, diagnostics)
    status = _enum(raw, "status", TaskStatus, location, diagnostics)
    dependencies = _id_list(raw, "dependencies", location, diagnostics)
    parent_task_id = _positive_int(raw, "parentTaskId", location, diagnostics)

    if diagnostics:
        return ParseResult(diagnostics=diagnostics)
    return ParseResult(
        value=Subtask(
            id=subtask_id,
            title=title,
            description=description,
            status=status,
            parent_task_id=parent_task_id,
            dependencies=dependencies,
            details=details,
        )
    )


def parse_task(raw: Any, location: str = "task") -> ParseResult[Task]:
    """Parse one task record, including its subtasks."""
    diagnostics: List[Diagnostic] = []
    if not _require_mapping(raw, location, diagnostics):
        return ParseResult(diagnostics=diagnostics)

    task_id = _positive_int(raw, "id", location, diagnostics)
    title = _text(raw, "title", location, diagnostics, TITLE_MAX_LENGTH)
    description = _text(raw, "description", location, diagnostics, DESCRIPTION_MAX_LENGTH)
    details = _optional_text(raw, "details", location, diagnostics)
    test_strategy = _optional_text(raw, "testStrategy", location, diagnostics)
    status = _enum(raw, "status", TaskStatus, location, diagnostics)
    priority = _enum(raw, "priority", TaskPriority, location, diagnostics)
    dependencies = _id_list(raw, "dependencies", location, diagnostics)
    created_at = _timestamp(raw, "createdAt", location, diagnostics)
    updated_at = _timestamp(raw, "updatedAt", location, diagnostics)
    estimated_hours = _positive_number(raw, "estimatedHours", location, diagnostics)
    actual_hours = _positive_number(raw, "actualHours", location, diagnostics)
    assignee = _optional_text(raw, "assignee", location, diagnostics)
    tags = _tags(raw, location, diagnostics)

    subtasks: List[Subtask] = []
    raw_subtasks = raw.get("subtasks")
    if raw_subtasks is not None and not isinstance(raw_subtasks, list):
        _error(
            diagnostics,
            "INVALID_TYPE",
            _child(location, "subtasks"),
            f"expected array, got {type(raw_subtasks).__name__}",
        )
    else:
        for index, raw_subtask in enumerate(raw_subtasks or []):
            result = parse_subtask(raw_subtask, f"{_child(location, 'subtasks')}[{index}]")
            diagnostics.extend(result.diagnostics)
            if result.ok:
                subtasks.append(result.value)

    if diagnostics:
        return ParseResult(diagnostics=diagnostics)
    return ParseResult(
        value=Task(
            id=task_id,
            title=title,
            description=description,
            status=status,
            priority=priority,
            dependencies=dependencies,
            subtasks=subtasks,
            details=details,
            test_strategy=test_strategy,
            created_at=created_at,
            updated_at=updated_at,
            estimated_hours=estimated_hours,
            actual_hours=actual_hours,
            assignee=assignee,
            tags=tags,
        )
    )


def parse_metadata(raw: Any, location: str = "metadata") -> ParseResult[CollectionMetadata]:
    """Parse the collection metadata block."""
    diagnostics: List[Diagnostic] = []
    if not _require_mapping(raw, location, diagnostics):
        return ParseResult(diagnostics=diagnostics)

    project_name = raw.get("projectName")
    if not isinstance(project_name, str):
        if project_name is None:
            _error(diagnostics, "MISSING_REQUIRED_FIELD", _child(location, "projectName"), "is required")
        else:
            _error(
                diagnostics,
                "INVALID_TYPE",
                _child(location, "projectName"),
                f"expected string, got {type(project_name).__name__}",
            )
    created_at = _timestamp(raw, "createdAt", location, diagnostics, required=True)
    last_modified = _timestamp(raw, "lastModified", location, diagnostics, required=True)

    total_tasks = raw.get("totalTasks")
    loc = _child(location, "totalTasks")
    if total_tasks is None:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", loc, "is required")
    elif not _is_int(total_tasks):
        _error(diagnostics, "INVALID_TYPE", loc, f"expected integer, got {type(total_tasks).__name__}")
    elif total_tasks < 0:
        _error(diagnostics, "OUT_OF_RANGE", loc, f"must be non-negative, got {total_tasks}")

    checksum = raw.get("checksum")
    if checksum is not None and not isinstance(checksum, str):
        _error(
            diagnostics,
            "INVALID_TYPE",
            _child(location, "checksum"),
            f"expected string, got {type(checksum).__name__}",
        )

    if diagnostics:
        return ParseResult(diagnostics=diagnostics)
    return ParseResult(
        value=CollectionMetadata(
            project_name=project_name,
            created_at=created_at,
            last_modified=last_modified,
            total_tasks=total_tasks,
            checksum=checksum or None,
        )
    )


def parse_collection(raw: Any) -> ParseResult[TasksCollection]:
    """
    Parse a whole collection document.

    Args:
        raw: Decoded JSON document

    Returns:
        ParseResult holding the typed collection, or every schema
        diagnostic found across the document
    """
    diagnostics: List[Diagnostic] = []
    if not _require_mapping(raw, "", diagnostics):
        return ParseResult(diagnostics=diagnostics)

    version = raw.get("version", DEFAULT_COLLECTION_VERSION)
    if not isinstance(version, str):
        _error(diagnostics, "INVALID_TYPE", "version", f"expected string, got {type(version).__name__}")

    metadata_result: ParseResult[CollectionMetadata]
    if "metadata" not in raw:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", "metadata", "is required")
        metadata_result = ParseResult()
    else:
        metadata_result = parse_metadata(raw["metadata"])
        diagnostics.extend(metadata_result.diagnostics)

    tasks: List[Task] = []
    raw_tasks = raw.get("tasks")
    if raw_tasks is None:
        _error(diagnostics, "MISSING_REQUIRED_FIELD", "tasks", "is required")
    elif not isinstance(raw_tasks, list):
        _error(diagnostics, "INVALID_TYPE", "tasks", f"expected array, got {type(raw_tasks).__name__}")
    else:
        for index, raw_task in enumerate(raw_tasks):
            result = parse_task(raw_task, f"tasks[{index}]")
            diagnostics.extend(result.diagnostics)
            if result.ok:
                tasks.append(result.value)

    if diagnostics:
        return ParseResult(diagnostics=diagnostics)
    return ParseResult(
        value=TasksCollection(metadata=metadata_result.value, tasks=tasks, version=version)
    )

