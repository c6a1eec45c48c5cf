"""
Collection file I/O: reading, atomic writes, and backups.

All direct file-system interactions for collection files live here.
Writes go to a temp file in the target's directory and are renamed over
the target, so readers only ever see the old or the new complete file.
"""

import json
import logging
import os
import shutil
import stat
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

from taskvault.core.errors import CollectionIOError
from taskvault.core.models import TasksCollection

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"

PathLike = Union[str, Path]


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def read_bytes(path: PathLike) -> bytes:
    """Read a collection file.

    Raises:
        CollectionIOError: If the file is missing or unreadable
    """
    path = Path(path)
    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise CollectionIOError(path, "file not found") from None
    except IsADirectoryError:
        raise CollectionIOError(path, "is a directory") from None
    except PermissionError:
        raise CollectionIOError(path, "permission denied") from None
    except OSError as exc:
        raise CollectionIOError(path, f"read failed: {exc}") from exc


def decode_document(content: bytes, path: PathLike) -> Any:
    """Decode UTF-8 JSON bytes.

    Raises:
        CollectionIOError: If the bytes are not UTF-8 encoded JSON
    """
    try:
        return json.loads(content.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise CollectionIOError(path, f"corrupt file (not UTF-8): {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CollectionIOError(path, f"corrupt file (invalid JSON): {exc}") from exc


def serialize_collection(collection: TasksCollection) -> bytes:
    """Render a collection as pretty-printed UTF-8 JSON."""
    text = json.dumps(collection.to_dict(), indent=2, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def _target_mode(path: Path) -> int:
    """Permission bits for a rewritten file: the existing mode, or the umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_atomic(path: PathLike, content: bytes) -> None:
    """
    Replace ``path`` with ``content`` atomically.

    An existing file keeps its permission bits; a new one gets the umask
    default rather than the owner-only mode of the temp file.

    Args:
        path: Target file (parent directories are created)
        content: Bytes to write

    Raises:
        CollectionIOError: If the temp file cannot be written or renamed
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
    except OSError as exc:
        raise CollectionIOError(path, f"cannot create temp file: {exc}") from exc

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(temp_path, _target_mode(path))
        os.replace(temp_path, path)
        logger.debug("Wrote %d bytes to %s", len(content), path)
    except OSError as exc:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise CollectionIOError(path, f"write failed: {exc}") from exc


def backup_path_for(path: PathLike) -> Path:
    path = Path(path)
    return path.with_name(path.name + BACKUP_SUFFIX)


def backup_file(path: PathLike) -> Optional[Path]:
    """
    Copy ``path`` to its sibling ``.bak`` file, best effort.

    Returns:
        Path to the backup, or None when there was nothing to back up or
        the copy failed (the failure is logged, never raised)
    """
    path = Path(path)
    if not path.exists():
        return None
    backup = backup_path_for(path)
    try:
        shutil.copy2(path, backup)
        return backup
    except OSError as exc:
        logger.warning("Failed to create backup of %s: %s", path, exc)
        return None
