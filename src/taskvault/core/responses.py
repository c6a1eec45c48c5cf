"""
Response envelope for command output.

Every command renders one ``ToolResponse``:
``{"success", "data", "error", "meta"}``. Failures carry ``error_code``,
``error_type`` and, where useful, ``remediation`` and ``details`` inside
``data``.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from taskvault.core.errors import (
    CollectionIOError,
    CollectionValidationError,
    ConfigValidationError,
    IntegrityError,
    PartitionError,
    StatusTransitionRejected,
    TaskVaultError,
)

RESPONSE_VERSION = "response-v1"


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SCHEMA_ERROR = "SCHEMA_ERROR"
    INTEGRITY_ERROR = "INTEGRITY_ERROR"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    IO_ERROR = "IO_ERROR"

    # System errors
    PARTITION_FAILED = "PARTITION_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorType(str, Enum):
    """Error categories for routing and client-side handling."""

    VALIDATION = "validation"  # fix the input
    NOT_FOUND = "not_found"
    IO = "io"  # check the file system
    CONFLICT = "conflict"  # fix the data, then retry
    INTERNAL = "internal"


@dataclass
class ToolResponse:
    """
    Standard command result.

    Attributes:
        success: Whether the operation completed successfully
        data: Payload on success, error context on failure
        error: Human-readable message when ``success`` is false
        meta: Envelope metadata, always carrying ``version``
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": RESPONSE_VERSION})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _build_meta(
    *,
    warnings: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    meta: Dict[str, Any] = {"version": RESPONSE_VERSION}
    if warnings:
        meta["warnings"] = list(warnings)
    if extra:
        meta.update(dict(extra))
    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
    meta: Optional[Mapping[str, Any]] = None,
    **fields: Any,
) -> ToolResponse:
    """Create a success response.

    Args:
        data: Optional mapping used as the base payload.
        warnings: Non-fatal issues to surface in ``meta.warnings``.
        meta: Extra metadata to merge into ``meta``.
        **fields: Additional payload fields (shorthand for ``data.update``).
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)
    return ToolResponse(success=True, data=payload, error=None, meta=_build_meta(warnings=warnings, extra=meta))


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    meta: Optional[Mapping[str, Any]] = None,
) -> ToolResponse:
    """Create an error response.

    Args:
        message: Human-readable description of the failure.
        data: Optional mapping with additional machine-readable context.
        error_code: Canonical error code (``ErrorCode`` or string).
        error_type: Error category (``ErrorType`` or string).
        remediation: User-facing guidance on how to fix the issue.
        details: Nested structure describing the failure.
        meta: Extra metadata to merge into ``meta``.

    Example:
        >>> error_response(
        ...     "Schema check failed",
        ...     error_code=ErrorCode.SCHEMA_ERROR,
        ...     error_type=ErrorType.VALIDATION,
        ...     remediation="Fix the listed fields and retry",
        ... )
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    code = error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    kind = error_type if error_type is not None else ErrorType.INTERNAL

    payload.setdefault("error_code", code.value if isinstance(code, Enum) else code)
    payload.setdefault("error_type", kind.value if isinstance(kind, Enum) else kind)
    if remediation is not None:
        payload.setdefault("remediation", remediation)
    if details:
        payload.setdefault("details", dict(details))

    return ToolResponse(success=False, data=payload, error=message, meta=_build_meta(extra=meta))


def error_from_exception(exc: TaskVaultError) -> ToolResponse:
    """Translate a taskvault exception into an error response."""
    if isinstance(exc, CollectionValidationError):
        is_integrity = isinstance(exc, IntegrityError)
        details: Dict[str, Any] = {
            "problems": exc.problems,
            "codes": sorted({diag.code for diag in exc.diagnostics}),
        }
        if exc.source is not None:
            details["path"] = str(exc.source)
        return error_response(
            f"{exc.kind} check failed with {len(exc.diagnostics)} problem(s)",
            error_code=ErrorCode.INTEGRITY_ERROR if is_integrity else ErrorCode.SCHEMA_ERROR,
            error_type=ErrorType.CONFLICT if is_integrity else ErrorType.VALIDATION,
            remediation="Fix every listed problem and retry",
            details=details,
        )
    if isinstance(exc, CollectionIOError):
        missing = exc.reason == "file not found"
        return error_response(
            str(exc),
            error_code=ErrorCode.NOT_FOUND if missing else ErrorCode.IO_ERROR,
            error_type=ErrorType.NOT_FOUND if missing else ErrorType.IO,
            remediation="Check the path and file permissions",
            details={"path": str(exc.path), "reason": exc.reason},
        )
    if isinstance(exc, PartitionError):
        return error_response(
            str(exc),
            error_code=ErrorCode.PARTITION_FAILED,
            error_type=ErrorType.CONFLICT,
            remediation="Treat any chunk files already written as provisional and retry",
            details={"operation": exc.operation, "failures": exc.failures},
        )
    if isinstance(exc, ConfigValidationError):
        return error_response(
            str(exc),
            error_code=ErrorCode.INVALID_CONFIG,
            error_type=ErrorType.VALIDATION,
            remediation="Correct the configuration file or TASKVAULT_* environment variables",
            details={"problems": exc.problems},
        )
    if isinstance(exc, StatusTransitionRejected):
        return error_response(
            str(exc),
            error_code=ErrorCode.INVALID_TRANSITION,
            error_type=ErrorType.VALIDATION,
            details={"current": exc.current, "new": exc.new, "allowed": exc.allowed},
        )
    return error_response(str(exc))
