"""
Unit tests for taskvault.core.analysis.

Covers id allocation, readiness, statistics, collection analysis and
archiving of completed tasks.
"""

import json

import pytest

from taskvault.config import EngineConfig
from taskvault.core.analysis import (
    analyze_collection,
    archive_completed,
    completion_percentage,
    next_subtask_id,
    next_task_id,
    ready_tasks,
    task_statistics,
)
from taskvault.core.errors import IntegrityError
from taskvault.core.validation import parse_collection, validate_collection


def _collection(document):
    return parse_collection(document).value


class TestIdAllocation:
    def test_next_task_id_fills_gaps(self, make_task, make_document):
        tasks = _collection(make_document([make_task(1), make_task(2), make_task(4)])).tasks
        assert next_task_id(tasks) == 3

    def test_next_task_id_for_empty_list(self):
        assert next_task_id([]) == 1

    def test_next_subtask_id(self, make_task, make_subtask, make_document):
        task = _collection(
            make_document([make_task(1, subtasks=[make_subtask(1, 1), make_subtask(3, 1)])])
        ).tasks[0]
        assert next_subtask_id(task) == 2


class TestReadiness:
    def test_ready_tasks(self, sample_document):
        # Task 2 waits on done task 1; task 3 is already in progress.
        tasks = _collection(sample_document).tasks
        assert [t.id for t in ready_tasks(tasks)] == [2]

    def test_unknown_dependency_is_not_done(self, make_task, make_document):
        tasks = _collection(make_document([make_task(1, dependencies=[50])])).tasks
        assert ready_tasks(tasks) == []


class TestStatistics:
    """Tests for completion_percentage() and task_statistics()."""

    def test_completion_rounds_half_up(self, make_task, make_document):
        tasks = _collection(
            make_document(
                [make_task(1, status="done")] + [make_task(i) for i in range(2, 9)]
            )
        ).tasks
        # 1/8 = 12.5%
        assert completion_percentage(tasks) == 13

    def test_completion_for_empty_list(self):
        assert completion_percentage([]) == 0

    def test_task_statistics(self, sample_document):
        stats = task_statistics(_collection(sample_document).tasks)

        assert stats == {
            "total": 3,
            "by_status": {"done": 1, "pending": 1, "in-progress": 1},
            "by_priority": {"high": 1, "medium": 1, "low": 1},
            "completion_percentage": 33,
            "average_subtasks": 0.7,
        }

    def test_statistics_for_empty_list(self):
        stats = task_statistics([])
        assert stats["total"] == 0
        assert stats["average_subtasks"] == 0.0


class TestAnalyzeCollection:
    """Tests for analyze_collection()."""

    def test_clean_collection(self, sample_document):
        report = analyze_collection(_collection(sample_document))

        assert report.total_tasks == 3
        assert report.completed_tasks == 1
        assert report.pending_tasks == 1
        assert report.duplicate_task_ids == []
        assert report.circular_dependencies == []
        assert report.recommendations == []

    def test_reports_problems_found_without_integrity_checks(
        self, make_task, make_subtask, make_document
    ):
        document = make_document(
            [
                make_task(1, dependencies=[2], status="done"),
                make_task(2, dependencies=[1], status="done"),
                make_task(2, subtasks=[make_subtask(1, 9)]),
            ]
        )
        collection = validate_collection(document, check_integrity=False)

        report = analyze_collection(collection, EngineConfig(max_tasks_per_file=2))

        assert report.duplicate_task_ids == [2]
        assert report.orphaned_subtasks == 1
        assert report.circular_dependencies == ["1 -> 2 -> 1"]
        assert report.recommendations == [
            "Task count (3) exceeds 2. Consider splitting into multiple files.",
            "Many tasks are completed. Consider archiving them to reduce file size.",
            "1 duplicate task IDs found. These need to be resolved.",
            "1 orphaned subtasks found. These need to be fixed.",
            "1 circular dependencies detected.",
        ]

    def test_to_dict(self, sample_document):
        data = analyze_collection(_collection(sample_document)).to_dict()
        assert data["total_tasks"] == 3
        assert isinstance(data["recommendations"], list)


class TestArchiveCompleted:
    """Tests for archive_completed()."""

    @pytest.fixture
    def archivable(self, make_task, make_document):
        return make_document(
            [
                make_task(1, status="done"),
                make_task(2, status="done", dependencies=[1]),
                make_task(3, status="pending"),
            ]
        )

    def test_moves_done_tasks(self, store, write_document, archivable, tmp_path):
        path = write_document(archivable)
        archive_path = tmp_path / "archive.json"

        result = archive_completed(store, path, archive_path)

        assert result.archived_ids == [1, 2]
        assert result.remaining_tasks == 1
        assert store.load(path).task_ids() == [3]
        archive = json.loads(archive_path.read_text(encoding="utf-8"))
        assert [t["id"] for t in archive["tasks"]] == [1, 2]
        assert archive["metadata"]["projectName"] == "Demo Project - Archive"

    def test_appends_to_existing_archive(
        self, store, write_document, archivable, make_task, make_document, tmp_path
    ):
        archive_path = write_document(
            make_document([make_task(10, status="done")], project_name="Old Archive"),
            "archive.json",
        )
        path = write_document(archivable)

        result = archive_completed(store, path, archive_path)

        assert result.archive_total == 3
        archive = json.loads(archive_path.read_text(encoding="utf-8"))
        assert [t["id"] for t in archive["tasks"]] == [1, 2, 10]
        assert archive["metadata"]["projectName"] == "Old Archive"

    def test_refuses_to_orphan_remaining_tasks(
        self, store, write_document, make_task, make_document, tmp_path
    ):
        path = write_document(
            make_document([make_task(1, status="done"), make_task(2, dependencies=[1])])
        )
        before = path.read_bytes()
        archive_path = tmp_path / "archive.json"

        with pytest.raises(IntegrityError) as exc_info:
            archive_completed(store, path, archive_path)

        assert exc_info.value.problems == ["task 2: Task 2 depends on completed task 1"]
        assert path.read_bytes() == before
        assert not archive_path.exists()

    def test_nothing_to_archive(self, store, write_document, make_task, make_document, tmp_path):
        path = write_document(make_document([make_task(1)]))
        archive_path = tmp_path / "archive.json"

        result = archive_completed(store, path, archive_path)

        assert result.archived_ids == []
        assert result.remaining_tasks == 1
        assert not archive_path.exists()
