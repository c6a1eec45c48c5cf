"""
Partitioning of oversized collections.

Large collections are split into fixed-size chunk files after ordering
tasks so every dependency precedes its dependents. Chunk files may refer to
tasks that live in an earlier chunk; merging loads them with external
references tolerated and validates the reassembled collection in full.
"""

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from taskvault.config import EngineConfig
from taskvault.core.errors import CollectionValidationError, PartitionError, TaskVaultError
from taskvault.core.models import CollectionMetadata, Task, TasksCollection
from taskvault.core.storage import CollectionStore, serialize_collection, utc_now_iso, write_atomic

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

CHUNK_FILE_TEMPLATE = "tasks-chunk-{index}.json"
DEFAULT_MERGED_PROJECT_NAME = "Merged Project"

_CHUNK_SUFFIX = re.compile(r" - Chunk \d+$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def topological_order(tasks: Sequence[Task]) -> List[Task]:
    """
    Order tasks so that dependencies come before their dependents.

    Depth-first from each task in original order; ties keep the original
    order. Unknown dependency ids are ignored and a task already on the
    traversal path is not revisited, so cyclic input still yields every
    task exactly once.
    """
    task_map: Dict[int, Task] = {}
    for task in tasks:
        task_map.setdefault(task.id, task)

    ordered: List[Task] = []
    placed: Set[int] = set()
    emitted: Set[int] = set()

    for root in tasks:
        if root.id in placed:
            if id(root) not in emitted:
                # Duplicate id: keep the copy in place after the first.
                ordered.append(root)
                emitted.add(id(root))
            continue
        placed.add(root.id)
        stack: List[Tuple[Task, int]] = [(root, 0)]
        while stack:
            task, position = stack[-1]
            if position < len(task.dependencies):
                stack[-1] = (task, position + 1)
                dep = task_map.get(task.dependencies[position])
                if dep is not None and dep.id not in placed:
                    placed.add(dep.id)
                    stack.append((dep, 0))
                continue
            stack.pop()
            ordered.append(task)
            emitted.add(id(task))

    return ordered


def chunk_project_name(project_name: str, index: int) -> str:
    return f"{project_name} - Chunk {index}"


def base_project_name(project_name: str) -> str:
    """Strip a ``" - Chunk N"`` suffix added by a split."""
    return _CHUNK_SUFFIX.sub("", project_name)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _recency(task: Task) -> datetime:
    return _parse_timestamp(task.updated_at) or _parse_timestamp(task.created_at) or _EPOCH


def dedupe_tasks(tasks: Sequence[Task]) -> List[Task]:
    """
    Keep one task per id, preferring the most recently updated copy.

    Recency is ``updatedAt``, then ``createdAt``, then the epoch. On a tie
    the copy that appears later in ``tasks`` wins. The result is sorted by id.
    """
    winners: Dict[int, Task] = {}
    for task in tasks:
        current = winners.get(task.id)
        if current is None or _recency(task) >= _recency(current):
            winners[task.id] = task
    return [winners[task_id] for task_id in sorted(winners)]


class PartitionManager:
    """
    Split collections into chunk files and merge them back.

    Args:
        store: Store used to read inputs and persist merged output
        config: Engine configuration; defaults to the store's
    """

    def __init__(self, store: CollectionStore, config: Optional[EngineConfig] = None) -> None:
        self.store = store
        self.config = config or store.config

    @property
    def chunk_size(self) -> int:
        return self.config.chunk_size

    def split(self, path: PathLike, output_dir: PathLike) -> List[Path]:
        """
        Split a collection into chunk files of ``chunk_size`` tasks.

        Args:
            path: Collection to split
            output_dir: Directory for ``tasks-chunk-N.json`` files (created)

        Returns:
            The chunk paths in order, or ``[path]`` if no split is needed

        Raises:
            PartitionError: If the input cannot be loaded or a chunk cannot
                be written. Chunks written before the failure are left in
                place.
        """
        path = Path(path)
        output_dir = Path(output_dir)
        try:
            collection = self.store.read(path)
        except TaskVaultError as exc:
            raise PartitionError("split", {str(path): str(exc)}) from exc

        if len(collection.tasks) <= self.chunk_size:
            logger.debug(
                "%s has %d tasks (limit %d); not splitting",
                path,
                len(collection.tasks),
                self.chunk_size,
            )
            return [path]

        ordered = topological_order(collection.tasks)
        now = utc_now_iso()
        chunk_paths: List[Path] = []

        for start in range(0, len(ordered), self.chunk_size):
            index = start // self.chunk_size + 1
            window = ordered[start : start + self.chunk_size]
            chunk = TasksCollection(
                version=collection.version,
                metadata=CollectionMetadata(
                    project_name=chunk_project_name(collection.metadata.project_name, index),
                    created_at=collection.metadata.created_at,
                    last_modified=now,
                    total_tasks=len(window),
                ),
                tasks=window,
            )
            chunk_path = output_dir / CHUNK_FILE_TEMPLATE.format(index=index)
            try:
                write_atomic(chunk_path, serialize_collection(chunk))
            except TaskVaultError as exc:
                raise PartitionError("split", {str(chunk_path): str(exc)}) from exc
            logger.debug("Wrote %d tasks to %s", len(window), chunk_path)
            chunk_paths.append(chunk_path)

        logger.info("Split %s into %d chunk(s) in %s", path, len(chunk_paths), output_dir)
        return chunk_paths

    def merge(self, paths: Sequence[PathLike], output_path: PathLike) -> TasksCollection:
        """
        Merge collection files into one and save it.

        Args:
            paths: Input files, in merge order
            output_path: Destination, written through the store

        Returns:
            The merged collection as saved

        Raises:
            PartitionError: If any input fails to load (all failures are
                reported), or if the merged collection is invalid
        """
        if not paths:
            raise PartitionError("merge", {}, message="merge requires at least one input file")

        collections: List[TasksCollection] = []
        failures: Dict[str, str] = {}
        for raw_path in paths:
            path = Path(raw_path)
            try:
                collections.append(self.store.read(path, allow_external_references=True))
            except TaskVaultError as exc:
                failures[str(path)] = str(exc)
        if failures:
            raise PartitionError("merge", failures)

        all_tasks = [task for collection in collections for task in collection.tasks]
        merged_tasks = dedupe_tasks(all_tasks)
        dropped = len(all_tasks) - len(merged_tasks)
        if dropped:
            logger.info("Discarded %d duplicate task(s) while merging", dropped)

        project_name = base_project_name(collections[0].metadata.project_name).strip()
        now = utc_now_iso()
        merged = TasksCollection(
            version=collections[0].version,
            metadata=CollectionMetadata(
                project_name=project_name or DEFAULT_MERGED_PROJECT_NAME,
                created_at=self._earliest_created_at(collections) or now,
                last_modified=now,
                total_tasks=len(merged_tasks),
            ),
            tasks=merged_tasks,
        )

        output_path = Path(output_path)
        try:
            saved = self.store.save(output_path, merged)
        except CollectionValidationError as exc:
            raise PartitionError(
                "merge",
                {str(output_path): str(exc)},
                message=f"merged collection is invalid:\n{exc}",
            ) from exc
        except TaskVaultError as exc:
            raise PartitionError("merge", {str(output_path): str(exc)}) from exc
        logger.info("Merged %d file(s) into %s (%d tasks)", len(paths), output_path, len(saved.tasks))
        return saved

    @staticmethod
    def _earliest_created_at(collections: Sequence[TasksCollection]) -> Optional[str]:
        earliest: Optional[Tuple[datetime, str]] = None
        for collection in collections:
            created = collection.metadata.created_at
            parsed = _parse_timestamp(created)
            if parsed is None:
                continue
            if earliest is None or parsed < earliest[0]:
                earliest = (parsed, created)
        return earliest[1] if earliest else None
