"""Shared fixtures for taskvault unit tests."""

import json
from pathlib import Path

import pytest

CREATED_AT = "2025-01-01T00:00:00Z"


def task_record(task_id, **overrides):
    """Build an on-disk task record with sensible defaults."""
    record = {
        "id": task_id,
        "title": f"Task {task_id}",
        "description": f"Description for task {task_id}",
        "status": "pending",
        "priority": "medium",
        "dependencies": [],
        "subtasks": [],
    }
    record.update(overrides)
    return record


def subtask_record(subtask_id, parent_task_id, **overrides):
    record = {
        "id": subtask_id,
        "title": f"Subtask {parent_task_id}.{subtask_id}",
        "description": "Subtask description",
        "status": "pending",
        "dependencies": [],
        "parentTaskId": parent_task_id,
    }
    record.update(overrides)
    return record


def collection_document(tasks, project_name="Demo Project", **metadata):
    """Wrap task records in a collection document with a matching totalTasks."""
    meta = {
        "projectName": project_name,
        "createdAt": CREATED_AT,
        "lastModified": CREATED_AT,
        "totalTasks": len(tasks),
    }
    meta.update(metadata)
    return {"version": "1.0.0", "metadata": meta, "tasks": tasks}


@pytest.fixture
def make_task():
    return task_record


@pytest.fixture
def make_subtask():
    return subtask_record


@pytest.fixture
def make_document():
    return collection_document


@pytest.fixture
def write_document(tmp_path):
    """Return a helper that writes a document as JSON under tmp_path."""

    def _write(document, name="tasks.json"):
        path = Path(tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_document():
    """Small, valid collection with dependencies, subtasks and tags."""
    tasks = [
        task_record(
            1,
            title="Set up repository",
            status="done",
            priority="high",
            tags=["infra"],
            createdAt="2025-01-01T09:00:00Z",
        ),
        task_record(
            2,
            title="Fix login bug",
            description="Users cannot log in with SSO",
            dependencies=[1],
            tags=["auth", "bug"],
            subtasks=[subtask_record(1, 2), subtask_record(2, 2, dependencies=[1])],
        ),
        task_record(
            3,
            title="Fix logout bug",
            status="in-progress",
            priority="low",
            dependencies=[1, 2],
            tags=["auth"],
        ),
    ]
    return collection_document(tasks)
