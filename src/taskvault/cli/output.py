"""JSON envelope output for CLI commands."""

import json
import sys
from typing import Any, Mapping, Optional, Sequence

import click

from taskvault.core.responses import ToolResponse, success_response


def _print(response: ToolResponse) -> None:
    click.echo(json.dumps(response.to_dict(), indent=2, ensure_ascii=False, default=str))


def emit_response(response: ToolResponse) -> None:
    """Print the envelope; exit with status 1 if it reports a failure."""
    _print(response)
    if not response.success:
        sys.exit(1)


def emit_success(
    data: Optional[Mapping[str, Any]] = None,
    *,
    warnings: Optional[Sequence[str]] = None,
) -> None:
    emit_response(success_response(data, warnings=warnings))
