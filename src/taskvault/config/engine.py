"""Typed engine configuration.

``EngineConfig`` is immutable; updates go through ``merge_config``, which
returns a new validated value and leaves its input untouched.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from taskvault.core.errors import ConfigValidationError

# Field name -> environment variable
ENV_VARS: Dict[str, str] = {
    "chunk_size": "TASKVAULT_CHUNK_SIZE",
    "max_tasks_per_file": "TASKVAULT_MAX_TASKS_PER_FILE",
    "cache_ttl_seconds": "TASKVAULT_CACHE_TTL",
    "cache_capacity": "TASKVAULT_CACHE_CAPACITY",
    "enable_backups": "TASKVAULT_ENABLE_BACKUPS",
    "enable_integrity_checks": "TASKVAULT_ENABLE_INTEGRITY_CHECKS",
}


class EngineConfig(BaseModel):
    """Tunable parameters for loading, caching and partitioning collections."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    chunk_size: int = Field(
        default=50, ge=1, description="Split threshold and tasks per partition"
    )
    max_tasks_per_file: int = Field(
        default=100, ge=1, description="Soft task-count limit for size checks"
    )
    cache_ttl_seconds: float = Field(
        default=300.0, gt=0, description="Seconds a cache entry stays eligible"
    )
    cache_capacity: int = Field(default=10, ge=1, description="Maximum cached collections")
    enable_backups: bool = Field(default=True, description="Copy the previous file to .bak on save")
    enable_integrity_checks: bool = Field(
        default=True, description="Run collection-wide integrity rules on load and save"
    )
    max_subtasks_per_task: int = Field(
        default=20, ge=1, description="Subtask count above which size checks warn"
    )
    max_file_size_bytes: int = Field(
        default=1024 * 1024, ge=1, description="Soft serialized-size limit for size checks"
    )
    watch_interval_seconds: float = Field(
        default=1.0, gt=0, description="Polling interval for CollectionWatcher"
    )

    def to_env(self) -> Dict[str, str]:
        """Export the env-configurable fields as environment variables."""
        env: Dict[str, str] = {}
        for field_name, var in ENV_VARS.items():
            value = getattr(self, field_name)
            env[var] = str(value).lower() if isinstance(value, bool) else str(value)
        return env


def merge_config(base: EngineConfig, updates: Mapping[str, Any]) -> EngineConfig:
    """
    Apply partial updates to a configuration.

    Args:
        base: Current configuration (not modified)
        updates: Field values to override

    Returns:
        A new, validated EngineConfig

    Raises:
        ConfigValidationError: Listing every rejected field
    """
    data = base.model_dump()
    data.update(updates)
    try:
        return EngineConfig.model_validate(data)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ConfigValidationError("Invalid engine configuration", problems) from exc
