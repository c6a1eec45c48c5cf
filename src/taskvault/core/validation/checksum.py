"""Deterministic content hashing for task lists.

The digest is computed over the canonical on-disk rendering of each task
(``Task.to_dict``) serialized with sorted keys and compact separators, so
the order in which record fields were supplied never changes the result.
"""

import hashlib
import json
from typing import Any, Mapping, Sequence, Union

from taskvault.core.models import Task


def canonical_json(value: Any) -> str:
    """Serialize ``value`` with stable key ordering and no whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_checksum(tasks: Sequence[Union[Task, Mapping[str, Any]]]) -> str:
    """Compute the SHA-256 checksum of a task list.

    Args:
        tasks: Typed tasks, or already-rendered task dicts

    Returns:
        Hex digest (64 characters)
    """
    records = [task.to_dict() if isinstance(task, Task) else dict(task) for task in tasks]
    return hashlib.sha256(canonical_json(records).encode("utf-8")).hexdigest()


def compute_bytes_checksum(content: bytes) -> str:
    """SHA-256 of raw file bytes, used to detect on-disk changes."""
    return hashlib.sha256(content).hexdigest()
