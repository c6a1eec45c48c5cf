"""Typed records for a persisted task collection.

The dataclasses below are the in-memory form of the on-disk JSON document.
Parsing and validation live in ``taskvault.core.validation``; these classes
only know how to render themselves back into the camelCase on-disk shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

DEFAULT_COLLECTION_VERSION = "1.0.0"


class TaskStatus(str, Enum):
    """Lifecycle status shared by tasks and subtasks."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"
    DEFERRED = "deferred"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


@dataclass
class Subtask:
    """A unit of work owned by a single parent task.

    Subtask ids are unique among siblings only; ``parent_task_id`` must equal
    the id of the owning task.
    """

    id: int
    title: str
    description: str
    status: TaskStatus
    parent_task_id: int
    dependencies: List[int] = field(default_factory=list)
    details: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title.strip(),
            "description": self.description.strip(),
            "status": self.status.value,
            "dependencies": list(self.dependencies),
            "parentTaskId": self.parent_task_id,
        }
        details = _clean(self.details)
        if details:
            data["details"] = details
        return data


@dataclass
class Task:
    """A top-level work item.

    Attributes:
        id: Positive integer, unique within the collection
        title: 1-200 characters
        description: 1-1000 characters
        status: Current lifecycle status
        priority: Priority level
        dependencies: Ids of tasks that must be done before this one starts
        subtasks: Ordered subtasks owned by this task
        details: Optional free-text implementation notes
        test_strategy: Optional free-text test notes
        created_at: ISO 8601 timestamp string
        updated_at: ISO 8601 timestamp string
        estimated_hours: Positive effort estimate
        actual_hours: Positive effort spent
        assignee: Assignee identifier
        tags: Free-form tags
    """

    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    dependencies: List[int] = field(default_factory=list)
    subtasks: List[Subtask] = field(default_factory=list)
    details: Optional[str] = None
    test_strategy: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    assignee: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Render the on-disk record, omitting empty optional fields."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title.strip(),
            "description": self.description.strip(),
            "status": self.status.value,
            "priority": self.priority.value,
            "dependencies": list(self.dependencies),
            "subtasks": [subtask.to_dict() for subtask in self.subtasks],
            "tags": list(self.tags),
        }
        details = _clean(self.details)
        if details:
            data["details"] = details
        test_strategy = _clean(self.test_strategy)
        if test_strategy:
            data["testStrategy"] = test_strategy
        if self.created_at:
            data["createdAt"] = self.created_at
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        if self.estimated_hours:
            data["estimatedHours"] = self.estimated_hours
        if self.actual_hours:
            data["actualHours"] = self.actual_hours
        if self.assignee:
            data["assignee"] = self.assignee
        return data


@dataclass
class CollectionMetadata:
    """Collection-level metadata block."""

    project_name: str
    created_at: str
    last_modified: str
    total_tasks: int
    checksum: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "projectName": self.project_name,
            "createdAt": self.created_at,
            "lastModified": self.last_modified,
            "totalTasks": self.total_tasks,
        }
        if self.checksum:
            data["checksum"] = self.checksum
        return data


@dataclass
class TasksCollection:
    """A versioned, ordered collection of tasks plus its metadata."""

    metadata: CollectionMetadata
    tasks: List[Task] = field(default_factory=list)
    version: str = DEFAULT_COLLECTION_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "metadata": self.metadata.to_dict(),
            "tasks": [task.to_dict() for task in self.tasks],
        }

    def task_ids(self) -> List[int]:
        return [task.id for task in self.tasks]

    def get_task(self, task_id: int) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
