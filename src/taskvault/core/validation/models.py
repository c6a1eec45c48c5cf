"""Validation data models for task collections."""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class Diagnostic:
    """
    Structured validation finding.

    Provides a machine-readable record of one problem so that callers
    can render an itemized list of fixes.
    """

    code: str  # Diagnostic code (e.g., "DUPLICATE_TASK_ID", "INVALID_STATUS")
    message: str  # Human-readable description
    severity: str = "error"  # "error", "warning", "info"
    category: str = "schema"  # Grouping (e.g., "schema", "dependency", "metadata")
    location: Optional[str] = None  # Field path such as "tasks[2].title"


@dataclass
class ParseResult(Generic[T]):
    """
    Tagged outcome of parsing one record.

    ``value`` is only meaningful when ``ok`` is true; otherwise
    ``diagnostics`` lists every field that failed.
    """

    value: Optional[T] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.severity == "error" for d in self.diagnostics)


@dataclass
class SizeReport:
    """
    Advisory outcome of the soft size-limit policy.

    A report with ``ok`` false never blocks a save; it only carries
    warnings and recommendations for the owner of the file.
    """

    ok: bool = True
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    task_count: int = 0
    estimated_size_bytes: int = 0
