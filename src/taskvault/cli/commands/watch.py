"""Watch a collection file and report reloads."""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from taskvault.cli.logging import cli_command, get_cli_logger
from taskvault.cli.output import emit_success
from taskvault.cli.registry import get_context
from taskvault.core.models import TasksCollection
from taskvault.core.storage import CollectionWatcher

logger = get_cli_logger()


@click.command("watch")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--iterations",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Number of polls before exiting (0 polls until interrupted).",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between polls (default: watch_interval_seconds).",
)
@click.pass_context
@cli_command("watch")
def watch_cmd(
    ctx: click.Context,
    path: Path,
    iterations: int,
    interval: Optional[float],
) -> None:
    """Poll PATH and print one JSON line per reload or failed reload."""
    cli_ctx = get_context(ctx)
    events: List[Dict[str, Any]] = []

    def record(event: Dict[str, Any]) -> None:
        events.append(event)
        click.echo(json.dumps(event))

    def on_change(collection: TasksCollection) -> None:
        record(
            {
                "event": "reloaded",
                "path": str(path),
                "total_tasks": len(collection.tasks),
                "checksum": collection.metadata.checksum,
            }
        )

    def on_error(exc: Exception) -> None:
        record({"event": "reload_failed", "path": str(path), "error": str(exc)})

    # Fail fast on a file that is invalid before watching starts.
    cli_ctx.store.load(path)
    watcher = CollectionWatcher(cli_ctx.store, path, on_change, on_error=on_error, interval=interval)

    polls = 0
    try:
        while iterations == 0 or polls < iterations:
            if polls:
                time.sleep(watcher.interval)
            watcher.check()
            polls += 1
    except KeyboardInterrupt:
        logger.info("Watch interrupted after %d poll(s)", polls)

    emit_success({"path": str(path), "polls": polls, "events": events})
