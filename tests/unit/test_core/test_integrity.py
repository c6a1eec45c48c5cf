"""
Unit tests for collection-wide integrity rules.

Covers duplicate ids, dependency cycles, dangling references, subtask
ownership, subtask dependency loops and metadata/checksum checks.
"""

import pytest

from taskvault.core.errors import IntegrityError
from taskvault.core.validation import (
    check_collection_integrity,
    compute_checksum,
    find_dependency_cycles,
    parse_collection,
    validate_collection,
)


def _integrity_codes(document, **kwargs):
    collection = parse_collection(document).value
    return [d.code for d in check_collection_integrity(collection, **kwargs)]


class TestDependencyCycles:
    """Tests for cycle detection."""

    def test_three_node_cycle_reported_with_all_ids(self, make_task, make_document):
        document = make_document(
            [
                make_task(1, dependencies=[2]),
                make_task(2, dependencies=[3]),
                make_task(3, dependencies=[1]),
            ]
        )

        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)

        [diag] = exc_info.value.diagnostics
        assert diag.code == "CIRCULAR_DEPENDENCY"
        assert diag.message == "Circular dependency detected: 1 -> 2 -> 3 -> 1"

    def test_acyclic_graph_has_no_cycles(self, make_task, make_document):
        document = make_document(
            [
                make_task(1, dependencies=[2]),
                make_task(2, dependencies=[3]),
                make_task(3),
            ]
        )
        assert validate_collection(document).task_ids() == [1, 2, 3]

    def test_self_dependency_is_a_cycle(self, make_task, make_document):
        tasks = parse_collection(make_document([make_task(4, dependencies=[4])])).value.tasks
        assert find_dependency_cycles(tasks) == [[4, 4]]

    def test_diamond_is_not_a_cycle(self, make_task, make_document):
        tasks = parse_collection(
            make_document(
                [
                    make_task(1, dependencies=[2, 3]),
                    make_task(2, dependencies=[4]),
                    make_task(3, dependencies=[4]),
                    make_task(4),
                ]
            )
        ).value.tasks
        assert find_dependency_cycles(tasks) == []

    def test_separate_cycles_are_each_reported(self, make_task, make_document):
        tasks = parse_collection(
            make_document(
                [
                    make_task(1, dependencies=[2]),
                    make_task(2, dependencies=[1]),
                    make_task(3, dependencies=[4]),
                    make_task(4, dependencies=[3]),
                ]
            )
        ).value.tasks
        assert find_dependency_cycles(tasks) == [[1, 2, 1], [3, 4, 3]]


class TestReferences:
    """Tests for dangling dependency references."""

    def test_dangling_task_reference_names_both_ids(self, make_task, make_document):
        document = make_document([make_task(1, dependencies=[99])])

        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)

        assert exc_info.value.problems == [
            "tasks[0].dependencies: Task 1 depends on non-existent task 99"
        ]

    def test_dangling_subtask_reference(self, make_task, make_subtask, make_document):
        document = make_document(
            [make_task(1, subtasks=[make_subtask(2, 1, dependencies=[42])])]
        )
        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)
        assert "Subtask 1.2 depends on non-existent task 42" in exc_info.value.problems[0]

    def test_external_references_can_be_tolerated(self, make_task, make_document):
        document = make_document([make_task(1, dependencies=[99])])
        collection = validate_collection(document, allow_external_references=True)
        assert collection.tasks[0].dependencies == [99]


class TestIdentityAndSubtasks:
    """Tests for duplicate ids and subtask ownership."""

    def test_duplicate_task_id_reported_once(self, make_task, make_document):
        document = make_document([make_task(1), make_task(1), make_task(1)])
        assert _integrity_codes(document) == ["DUPLICATE_TASK_ID"]

    def test_duplicate_subtask_ids(self, make_task, make_subtask, make_document):
        document = make_document(
            [make_task(1, subtasks=[make_subtask(1, 1), make_subtask(1, 1)])]
        )
        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)
        assert exc_info.value.problems == [
            "tasks[0].subtasks[1].id: Duplicate subtask ID 1 in task 1"
        ]

    def test_subtask_ids_may_repeat_across_parents(self, make_task, make_subtask, make_document):
        document = make_document(
            [
                make_task(1, subtasks=[make_subtask(1, 1)]),
                make_task(2, subtasks=[make_subtask(1, 2)]),
            ]
        )
        assert _integrity_codes(document) == []

    def test_parent_mismatch(self, make_task, make_subtask, make_document):
        document = make_document([make_task(1, subtasks=[make_subtask(1, 5)])])
        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)
        assert exc_info.value.problems == [
            "tasks[0].subtasks[0].parentTaskId: Subtask 1 has incorrect parentTaskId (5, should be 1)"
        ]

    def test_subtask_depending_on_own_parent(self, make_task, make_subtask, make_document):
        document = make_document([make_task(1, subtasks=[make_subtask(1, 1, dependencies=[1])])])
        assert _integrity_codes(document) == ["SUBTASK_DEPENDENCY_CYCLE"]

    def test_subtask_depending_on_a_dependent_of_its_parent(
        self, make_task, make_subtask, make_document
    ):
        document = make_document(
            [
                make_task(1, subtasks=[make_subtask(1, 1, dependencies=[2])]),
                make_task(2, dependencies=[1]),
            ]
        )
        assert _integrity_codes(document) == ["SUBTASK_DEPENDENCY_CYCLE"]


class TestMetadata:
    """Tests for totalTasks and checksum verification."""

    def test_total_tasks_mismatch(self, make_task, make_document):
        document = make_document([make_task(1), make_task(2)], totalTasks=5)
        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)
        assert exc_info.value.problems == [
            "metadata.totalTasks: Metadata totalTasks (5) doesn't match actual tasks count (2)"
        ]

    def test_matching_checksum_passes(self, sample_document):
        tasks = parse_collection(sample_document).value.tasks
        sample_document["metadata"]["checksum"] = compute_checksum(tasks)
        assert validate_collection(sample_document).metadata.checksum == compute_checksum(tasks)

    def test_checksum_mismatch(self, sample_document):
        sample_document["metadata"]["checksum"] = "0" * 64
        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(sample_document)
        assert exc_info.value.problems == [
            "metadata.checksum: Checksum verification failed - data may be corrupted"
        ]


class TestAggregation:
    """Integrity failures are reported together, never one at a time."""

    def test_all_violations_in_one_error(self, make_task, make_subtask, make_document):
        document = make_document(
            [
                make_task(1, dependencies=[77]),
                make_task(1),
                make_task(2, subtasks=[make_subtask(1, 3)]),
            ],
            totalTasks=9,
        )

        with pytest.raises(IntegrityError) as exc_info:
            validate_collection(document)

        codes = [d.code for d in exc_info.value.diagnostics]
        assert codes == [
            "DUPLICATE_TASK_ID",
            "MISSING_DEPENDENCY_TARGET",
            "PARENT_MISMATCH",
            "TOTAL_TASKS_MISMATCH",
        ]

    def test_integrity_can_be_skipped(self, make_task, make_document):
        document = make_document([make_task(1, dependencies=[2]), make_task(1)], totalTasks=0)
        collection = validate_collection(document, check_integrity=False)
        assert len(collection.tasks) == 2

    def test_schema_errors_preempt_integrity(self, make_task, make_document):
        """Integrity rules never run on a document that failed the schema phase."""
        from taskvault.core.errors import SchemaError

        document = make_document([make_task(1, dependencies=[99], status="bogus")])
        with pytest.raises(SchemaError):
            validate_collection(document)
