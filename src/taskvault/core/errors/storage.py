"""Storage and partitioning error classes."""

from pathlib import Path
from typing import Dict, Optional, Union

from taskvault.core.errors.base import TaskVaultError


class CollectionIOError(TaskVaultError):
    """Raised when a collection file cannot be read or written.

    Covers missing files, permission problems and bytes that are not
    UTF-8 encoded JSON.

    Attributes:
        path: The file involved.
        reason: Short description of what went wrong.
    """

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class PartitionError(TaskVaultError):
    """Raised when a split or merge aborts.

    Attributes:
        failures: Mapping of input path to the error message it produced.
    """

    def __init__(
        self,
        operation: str,
        failures: Dict[str, str],
        message: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.failures = dict(failures)
        if message is None:
            lines = "\n".join(f"  - {path}: {reason}" for path, reason in self.failures.items())
            message = f"{operation} failed for {len(self.failures)} input(s):\n{lines}"
        super().__init__(message)
