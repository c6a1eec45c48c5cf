"""Status transition lookup."""

import click

from taskvault.cli.logging import cli_command
from taskvault.cli.output import emit_success
from taskvault.core.models import TaskStatus
from taskvault.core.validation import (
    allowed_transitions,
    require_status_transition,
    validate_status_transition,
)

STATUS_CHOICE = click.Choice([s.value for s in TaskStatus])


@click.command("transition")
@click.argument("current", type=STATUS_CHOICE)
@click.argument("new", type=STATUS_CHOICE)
@click.option("--strict", is_flag=True, help="Fail (exit 1) when the move is not allowed.")
@cli_command("transition")
def transition_cmd(current: str, new: str, strict: bool) -> None:
    """Check whether a task may move from CURRENT to NEW status."""
    if strict:
        require_status_transition(current, new)
    emit_success(
        {
            "current": current,
            "new": new,
            "allowed": validate_status_transition(current, new),
            "allowed_targets": allowed_transitions(current),
        }
    )
