"""Error hierarchy for taskvault.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from taskvault.core.errors import IntegrityError, SchemaError

    try:
        collection = validate_collection(raw)
    except CollectionValidationError as exc:
        for problem in exc.problems:
            print(problem)
"""

from taskvault.core.errors.base import TaskVaultError
from taskvault.core.errors.config import ConfigValidationError
from taskvault.core.errors.storage import CollectionIOError, PartitionError
from taskvault.core.errors.validation import (
    CollectionValidationError,
    IntegrityError,
    SchemaError,
    StatusTransitionRejected,
)

__all__ = [
    "TaskVaultError",
    # Validation errors
    "CollectionValidationError",
    "SchemaError",
    "IntegrityError",
    "StatusTransitionRejected",
    # Storage errors
    "CollectionIOError",
    "PartitionError",
    # Configuration errors
    "ConfigValidationError",
]
