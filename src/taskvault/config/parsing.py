"""Parsing helpers for configuration values coming from env vars or TOML."""

from typing import Any, Optional


def _try_parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in {"true", "1", "yes", "on"}:
        return True
    if normalized in {"false", "0", "no", "off"}:
        return False
    return None


def _try_parse_int(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _try_parse_float(value: Any) -> Optional[float]:
    try:
        return float(str(value).strip())
    except ValueError:
        return None
