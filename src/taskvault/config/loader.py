"""Layered configuration loading.

Priority (highest to lowest):
1. Environment variables (``TASKVAULT_*``)
2. TOML file (explicit path, ``TASKVAULT_CONFIG_FILE``, or ./taskvault.toml)
3. Default values
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from taskvault.config.engine import ENV_VARS, EngineConfig, merge_config
from taskvault.config.parsing import _try_parse_bool, _try_parse_float, _try_parse_int

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV_VAR = "TASKVAULT_CONFIG_FILE"
DEFAULT_CONFIG_FILENAME = "taskvault.toml"

_ENV_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "chunk_size": _try_parse_int,
    "max_tasks_per_file": _try_parse_int,
    "cache_ttl_seconds": _try_parse_float,
    "cache_capacity": _try_parse_int,
    "enable_backups": _try_parse_bool,
    "enable_integrity_checks": _try_parse_bool,
}


def _load_toml(path: Path) -> Dict[str, Any]:
    """Read the ``[engine]`` table from a TOML file."""
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.error("Error loading config file %s: %s", path, e)
        return {}

    engine = data.get("engine", {})
    if not isinstance(engine, dict):
        logger.warning("Ignoring non-table [engine] section in %s", path)
        return {}
    logger.debug("Loaded config from %s", path)
    return engine


def _load_env() -> Dict[str, Any]:
    """Collect overrides from environment variables, skipping unparseable ones."""
    updates: Dict[str, Any] = {}
    for field_name, var in ENV_VARS.items():
        raw = os.environ.get(var)
        if raw is None or not raw.strip():
            continue
        parsed = _ENV_PARSERS[field_name](raw)
        if parsed is None:
            logger.warning("Ignoring %s: cannot parse value %r", var, raw)
            continue
        updates[field_name] = parsed
    return updates


def load_config(config_file: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Build the effective configuration.

    Args:
        config_file: Optional explicit TOML path

    Returns:
        Validated EngineConfig

    Raises:
        ConfigValidationError: If a file or env value is out of range
    """
    config = EngineConfig()

    toml_path = config_file or os.environ.get(CONFIG_FILE_ENV_VAR)
    if toml_path:
        config = merge_config(config, _load_toml(Path(toml_path)))
    else:
        default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if default_path.exists():
            config = merge_config(config, _load_toml(default_path))

    env_updates = _load_env()
    if env_updates:
        config = merge_config(config, env_updates)
    return config
