"""taskvault: validated, cached and partitioned persistence for task collections."""

__version__ = "0.1.0"

from taskvault.config import EngineConfig, load_config, merge_config
from taskvault.core.analysis import (
    analyze_collection,
    archive_completed,
    completion_percentage,
    next_subtask_id,
    next_task_id,
    ready_tasks,
    task_statistics,
)
from taskvault.core.errors import (
    CollectionIOError,
    CollectionValidationError,
    ConfigValidationError,
    IntegrityError,
    PartitionError,
    SchemaError,
    StatusTransitionRejected,
    TaskVaultError,
)
from taskvault.core.index import TaskIndexer
from taskvault.core.models import (
    CollectionMetadata,
    Subtask,
    Task,
    TaskPriority,
    TasksCollection,
    TaskStatus,
)
from taskvault.core.partition import PartitionManager
from taskvault.core.storage import CollectionCache, CollectionStore, CollectionWatcher
from taskvault.core.validation import (
    check_size_limits,
    compute_checksum,
    validate_collection,
    validate_status_transition,
)

__all__ = [
    "__version__",
    # Models
    "CollectionMetadata",
    "Subtask",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TasksCollection",
    # Engine
    "CollectionCache",
    "CollectionStore",
    "CollectionWatcher",
    "EngineConfig",
    "PartitionManager",
    "TaskIndexer",
    # Functions
    "analyze_collection",
    "archive_completed",
    "check_size_limits",
    "completion_percentage",
    "compute_checksum",
    "load_config",
    "merge_config",
    "next_subtask_id",
    "next_task_id",
    "ready_tasks",
    "task_statistics",
    "validate_collection",
    "validate_status_transition",
    # Errors
    "CollectionIOError",
    "CollectionValidationError",
    "ConfigValidationError",
    "IntegrityError",
    "PartitionError",
    "SchemaError",
    "StatusTransitionRejected",
    "TaskVaultError",
]
