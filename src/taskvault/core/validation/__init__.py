"""
Validation operations for task collections.

Provides schema parsing, collection-wide integrity rules, the status state
machine, canonical checksums and the soft size-limit policy.
"""

from taskvault.core.validation.checksum import (
    canonical_json,
    compute_bytes_checksum,
    compute_checksum,
)
from taskvault.core.validation.constants import (
    STATUS_TRANSITIONS,
    VALID_PRIORITIES,
    VALID_STATUSES,
)
from taskvault.core.validation.limits import check_size_limits, estimate_serialized_size
from taskvault.core.validation.models import Diagnostic, ParseResult, SizeReport
from taskvault.core.validation.rules import (
    check_collection_integrity,
    find_dependency_cycles,
    validate_collection,
)
from taskvault.core.validation.schema import (
    parse_collection,
    parse_metadata,
    parse_subtask,
    parse_task,
)
from taskvault.core.validation.transitions import (
    allowed_transitions,
    require_status_transition,
    validate_status_transition,
)

__all__ = [
    # Constants
    "STATUS_TRANSITIONS",
    "VALID_PRIORITIES",
    "VALID_STATUSES",
    # Models
    "Diagnostic",
    "ParseResult",
    "SizeReport",
    # Functions
    "allowed_transitions",
    "canonical_json",
    "check_collection_integrity",
    "check_size_limits",
    "compute_bytes_checksum",
    "compute_checksum",
    "estimate_serialized_size",
    "find_dependency_cycles",
    "parse_collection",
    "parse_metadata",
    "parse_subtask",
    "parse_task",
    "require_status_transition",
    "validate_collection",
    "validate_status_transition",
]
