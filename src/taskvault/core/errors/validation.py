"""Validation error classes.

Schema and integrity failures are aggregated: a single exception carries
every problem found in one pass so callers can present an itemized list of
fixes rather than one opaque message.
"""

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from taskvault.core.errors.base import TaskVaultError

if TYPE_CHECKING:
    from taskvault.core.validation.models import Diagnostic


class CollectionValidationError(TaskVaultError):
    """Base class for aggregated validation failures.

    Attributes:
        diagnostics: Every diagnostic found, in discovery order.
        source: File the document came from, when known.
    """

    kind = "Validation"

    def __init__(
        self,
        diagnostics: Sequence["Diagnostic"],
        source: Optional[Union[str, Path]] = None,
    ) -> None:
        self.diagnostics = list(diagnostics)
        self.source = Path(source) if source is not None else None
        super().__init__(self._format())

    @property
    def problems(self) -> List[str]:
        """Itemized ``location: message`` strings, one per diagnostic."""
        items = []
        for diag in self.diagnostics:
            if diag.location:
                items.append(f"{diag.location}: {diag.message}")
            else:
                items.append(diag.message)
        return items

    def _format(self) -> str:
        where = f" in {self.source}" if self.source else ""
        header = f"{self.kind} check failed{where} ({len(self.diagnostics)} problem(s))"
        return header + ":\n" + "\n".join(f"  - {p}" for p in self.problems)


class SchemaError(CollectionValidationError):
    """Raised when fields are missing, mistyped, out of range or not in their enum."""

    kind = "Schema"


class IntegrityError(CollectionValidationError):
    """Raised when a schema-valid collection violates a collection-wide invariant.

    Covers duplicate ids, dependency cycles, dangling references,
    subtask/parent mismatches and metadata or checksum mismatches.
    """

    kind = "Integrity"


class StatusTransitionRejected(TaskVaultError):
    """Raised by ``require_status_transition`` for an illegal status change."""

    def __init__(self, current: str, new: str, allowed: Sequence[str]) -> None:
        self.current = current
        self.new = new
        self.allowed = list(allowed)
        allowed_text = ", ".join(self.allowed) if self.allowed else "none"
        super().__init__(
            f"Cannot move from '{current}' to '{new}' (allowed: {allowed_text})"
        )
