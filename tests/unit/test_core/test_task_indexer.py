"""Unit tests for TaskIndexer."""

import pytest

from taskvault.core.index import TaskIndexer, tokenize
from taskvault.core.models import TaskStatus
from taskvault.core.validation import parse_collection


@pytest.fixture
def indexer(make_task, make_document):
    tasks = parse_collection(
        make_document(
            [
                make_task(1, title="fix login bug", status="pending", tags=["auth", "bug"]),
                make_task(2, title="fix logout bug", status="done", tags=["auth"]),
                make_task(
                    3,
                    title="Write release notes",
                    description="Summarize the login changes",
                    priority="high",
                    tags=["docs"],
                ),
            ]
        )
    ).value.tasks
    index = TaskIndexer()
    index.build(tasks)
    return index


class TestTokenize:
    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Fix the LOGIN-bug!") == ["fix", "the", "login", "bug"]

    def test_drops_short_tokens(self):
        assert tokenize("a to be or API") == ["api"]

    def test_keeps_underscored_words(self):
        assert tokenize("user_id lookup") == ["user_id", "lookup"]


class TestSearch:
    """Tests for TaskIndexer.search()."""

    def test_criteria_are_combined_with_and(self, indexer):
        assert indexer.search(title="fix bug", status="pending") == [1]

    def test_every_title_token_must_match(self, indexer):
        assert indexer.search(title="fix bug") == [1, 2]
        assert indexer.search(title="fix login") == [1]
        assert indexer.search(title="fix release") == []

    def test_description_tokens(self, indexer):
        assert indexer.search(description="login") == [3]

    def test_exact_status_and_priority(self, indexer):
        assert indexer.search(status="done") == [2]
        assert indexer.search(status=TaskStatus.PENDING) == [1, 3]
        assert indexer.search(priority="high") == [3]

    def test_tags_match_any(self, indexer):
        assert indexer.search(tags=["bug", "docs"]) == [1, 3]

    def test_tags_combined_with_other_criteria(self, indexer):
        assert indexer.search(tags=["auth"], status="done") == [2]

    def test_no_criteria_matches_nothing(self, indexer):
        assert indexer.search() == []

    def test_empty_text_criteria_are_ignored(self, indexer):
        assert indexer.search(title="", status="pending") == [1, 3]
        assert indexer.search(description="", status="done") == [2]

    def test_empty_tag_list_is_ignored(self, indexer):
        assert indexer.search(tags=[], status="pending") == [1, 3]

    def test_only_empty_criteria_matches_nothing(self, indexer):
        assert indexer.search(title="", tags=[]) == []

    def test_query_without_usable_tokens_matches_nothing(self, indexer):
        assert indexer.search(title="a an") == []

    def test_unknown_values_match_nothing(self, indexer):
        assert indexer.search(status="review") == []
        assert indexer.search(tags=["nope"]) == []
        assert indexer.search(title="fix", priority="critical") == []

    def test_search_does_not_grow_index(self, indexer):
        indexer.search(title="unindexed", tags=["missing"])
        assert "unindexed" not in indexer.title_index
        assert "missing" not in indexer.tag_index


class TestBuild:
    """Tests for TaskIndexer.build()."""

    def test_rebuild_discards_previous_state(self, indexer, make_task, make_document):
        tasks = parse_collection(make_document([make_task(9, title="brand new")])).value.tasks
        indexer.build(tasks)

        assert indexer.search(title="fix") == []
        assert indexer.search(title="brand") == [9]

    def test_repeated_tokens_do_not_duplicate_results(self, make_task, make_document):
        tasks = parse_collection(make_document([make_task(4, title="bug bug bug")])).value.tasks
        index = TaskIndexer()
        index.build(tasks)

        assert index.title_index["bug"] == [4, 4, 4]
        assert index.search(title="bug bug") == [4]
