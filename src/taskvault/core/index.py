"""In-memory inverted index over a task list."""

import logging
import re
from collections import defaultdict
from typing import DefaultDict, Iterable, List, Optional, Sequence, Set

from taskvault.core.models import Task

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 3

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """Lower-case, replace punctuation with spaces, and keep tokens of 3+ chars."""
    cleaned = _NON_WORD.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


Postings = DefaultDict[str, List[int]]


class TaskIndexer:
    """
    Token and exact-value lookups over a task list.

    Call ``build()`` whenever the task list changes; the index holds no
    reference to the tasks themselves, only their ids.
    """

    def __init__(self) -> None:
        self.title_index: Postings = defaultdict(list)
        self.description_index: Postings = defaultdict(list)
        self.status_index: Postings = defaultdict(list)
        self.priority_index: Postings = defaultdict(list)
        self.tag_index: Postings = defaultdict(list)

    def _indexes(self) -> List[Postings]:
        return [
            self.title_index,
            self.description_index,
            self.status_index,
            self.priority_index,
            self.tag_index,
        ]

    def clear(self) -> None:
        for index in self._indexes():
            index.clear()

    def build(self, tasks: Iterable[Task]) -> None:
        """Discard all prior state and index ``tasks``."""
        self.clear()
        count = 0
        for task in tasks:
            count += 1
            for token in tokenize(task.title):
                self.title_index[token].append(task.id)
            for token in tokenize(task.description):
                self.description_index[token].append(task.id)
            self.status_index[task.status.value].append(task.id)
            self.priority_index[task.priority.value].append(task.id)
            for tag in task.tags:
                self.tag_index[tag].append(task.id)
        logger.debug(
            "Indexed %d tasks (%d title tokens, %d description tokens)",
            count,
            len(self.title_index),
            len(self.description_index),
        )

    def search(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> List[int]:
        """
        Find tasks matching every supplied criterion.

        Text criteria require every query token to match. ``tags`` matches
        any one of the given tags. Empty or None criteria are ignored; with
        no criteria at all the result is empty.

        Returns:
            Matching task ids, ascending, without duplicates
        """
        criteria: List[Set[int]] = []
        if title:
            criteria.append(self._match_text(self.title_index, title))
        if description:
            criteria.append(self._match_text(self.description_index, description))
        if status:
            criteria.append(self._lookup(self.status_index, str(getattr(status, "value", status))))
        if priority:
            criteria.append(
                self._lookup(self.priority_index, str(getattr(priority, "value", priority)))
            )
        if tags:
            matched: Set[int] = set()
            for tag in tags:
                matched |= self._lookup(self.tag_index, tag)
            criteria.append(matched)

        if not criteria:
            return []
        return sorted(set.intersection(*criteria))

    @staticmethod
    def _lookup(index: Postings, key: str) -> Set[int]:
        # .get avoids creating empty postings through the defaultdict
        return set(index.get(key, ()))

    def _match_text(self, index: Postings, query: str) -> Set[int]:
        tokens = tokenize(query)
        if not tokens:
            return set()
        result = self._lookup(index, tokens[0])
        for token in tokens[1:]:
            result &= self._lookup(index, token)
        return result
