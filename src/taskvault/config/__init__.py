"""Engine configuration: typed model, pure merge, and layered loading."""

from taskvault.config.engine import ENV_VARS, EngineConfig, merge_config
from taskvault.config.loader import load_config

__all__ = [
    "ENV_VARS",
    "EngineConfig",
    "load_config",
    "merge_config",
]
