"""
Validated, cached persistence for task collections.

``CollectionStore`` ties the file I/O helpers, the validator and a
``CollectionCache`` together. Every load goes through the validator on a
cache miss and every save re-validates, stamps metadata and writes
atomically.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from taskvault.config import EngineConfig
from taskvault.core.errors import CollectionValidationError, IntegrityError
from taskvault.core.models import CollectionMetadata, TasksCollection
from taskvault.core.storage.cache import CollectionCache
from taskvault.core.storage.io import (
    backup_file,
    decode_document,
    read_bytes,
    serialize_collection,
    utc_now_iso,
    write_atomic,
)
from taskvault.core.validation import (
    check_collection_integrity,
    compute_bytes_checksum,
    compute_checksum,
    validate_collection,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def empty_collection(project_name: str) -> TasksCollection:
    """Create a new collection with no tasks."""
    now = utc_now_iso()
    return TasksCollection(
        metadata=CollectionMetadata(
            project_name=project_name,
            created_at=now,
            last_modified=now,
            total_tasks=0,
        )
    )


class CollectionStore:
    """
    Load and save collections through a checksum-gated cache.

    Args:
        config: Engine configuration (defaults to ``EngineConfig()``)
        cache: Cache to use; one is built from ``config`` when omitted
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        cache: Optional[CollectionCache] = None,
    ) -> None:
        self.config = config or EngineConfig()
        if cache is None:
            cache = CollectionCache(
                ttl_seconds=self.config.cache_ttl_seconds,
                capacity=self.config.cache_capacity,
            )
        self.cache = cache

    def load(self, path: PathLike) -> TasksCollection:
        """
        Load a collection, serving an unchanged file from the cache.

        Args:
            path: Collection file

        Returns:
            A collection the caller may mutate freely

        Raises:
            CollectionIOError: Missing, unreadable or corrupt file
            SchemaError: Schema violations in the file
            IntegrityError: Integrity violations in the file
        """
        path = Path(path)
        content = read_bytes(path)
        checksum = compute_bytes_checksum(content)

        cached = self.cache.get(path, checksum)
        if cached is not None:
            return cached

        collection = self._validate(content, path, allow_external_references=False)
        self.cache.put(path, collection, checksum)
        logger.debug("Loaded %d tasks from %s", len(collection.tasks), path)
        return collection

    def read(self, path: PathLike, allow_external_references: bool = False) -> TasksCollection:
        """
        Read and validate a collection without touching the cache.

        ``allow_external_references`` tolerates dependencies on tasks that
        live in other files, as in partition files written by a split.
        """
        path = Path(path)
        return self._validate(
            read_bytes(path), path, allow_external_references=allow_external_references
        )

    def save(
        self,
        path: PathLike,
        collection: TasksCollection,
        allow_external_references: bool = False,
    ) -> TasksCollection:
        """
        Validate, stamp and atomically write a collection.

        The caller's object is not modified. ``lastModified``, ``totalTasks``
        and ``checksum`` are recomputed; the previous file is copied to
        ``<file>.bak`` first when backups are enabled.

        Args:
            path: Target file
            collection: Collection to persist
            allow_external_references: Tolerate dependencies on tasks kept in
                another file, as in archives

        Returns:
            The collection exactly as written

        Raises:
            SchemaError: If a field is invalid
            IntegrityError: If a collection-wide invariant is violated
            CollectionIOError: If the write fails
        """
        path = Path(path)
        document = collection.to_dict()
        metadata = document["metadata"]
        metadata["lastModified"] = utc_now_iso()
        metadata["totalTasks"] = len(document["tasks"])
        metadata.pop("checksum", None)

        try:
            stamped = validate_collection(document, check_integrity=False, source=path)
        except CollectionValidationError:
            logger.warning("Refusing to save invalid collection to %s", path)
            raise
        stamped.metadata.checksum = compute_checksum(stamped.tasks)

        if self.config.enable_integrity_checks:
            diagnostics = check_collection_integrity(
                stamped, allow_external_references=allow_external_references
            )
            if diagnostics:
                logger.warning("Refusing to save collection with integrity errors to %s", path)
                raise IntegrityError(diagnostics, source=path)

        if self.config.enable_backups:
            backup_file(path)

        content = serialize_collection(stamped)
        write_atomic(path, content)
        if allow_external_references:
            # load() would reject this file, so it must not be served from cache
            self.cache.invalidate(path)
        else:
            self.cache.put(path, stamped, compute_bytes_checksum(content))
        logger.info("Saved %d tasks to %s", len(stamped.tasks), path)
        return stamped

    def _validate(
        self, content: bytes, path: Path, allow_external_references: bool
    ) -> TasksCollection:
        document = decode_document(content, path)
        return validate_collection(
            document,
            check_integrity=self.config.enable_integrity_checks,
            allow_external_references=allow_external_references,
            source=path,
        )
