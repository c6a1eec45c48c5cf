"""Read-only collection commands: validate, stats, analyze, search."""

from pathlib import Path
from typing import Optional, Tuple

import click

from taskvault.cli.logging import cli_command, get_cli_logger
from taskvault.cli.output import emit_success
from taskvault.cli.registry import get_context
from taskvault.config import merge_config
from taskvault.core.analysis import (
    analyze_collection,
    next_task_id,
    ready_tasks,
    task_statistics,
)
from taskvault.core.index import TaskIndexer
from taskvault.core.models import TaskPriority, TaskStatus
from taskvault.core.storage import CollectionStore
from taskvault.core.validation import check_size_limits

logger = get_cli_logger()

COLLECTION_PATH = click.Path(dir_okay=False, path_type=Path)


@click.command("validate")
@click.argument("path", type=COLLECTION_PATH)
@click.pass_context
@cli_command("validate")
def validate_cmd(ctx: click.Context, path: Path) -> None:
    """Validate the collection at PATH and report size-limit warnings."""
    cli_ctx = get_context(ctx)
    collection = cli_ctx.store.load(path)
    config = cli_ctx.config
    report = check_size_limits(
        collection,
        max_tasks_per_file=config.max_tasks_per_file,
        max_file_size_bytes=config.max_file_size_bytes,
        max_subtasks_per_task=config.max_subtasks_per_task,
    )
    emit_success(
        {
            "path": str(path),
            "valid": True,
            "project_name": collection.metadata.project_name,
            "total_tasks": len(collection.tasks),
            "checksum": collection.metadata.checksum,
            "size": {
                "ok": report.ok,
                "task_count": report.task_count,
                "estimated_size_bytes": report.estimated_size_bytes,
                "recommendations": report.recommendations,
            },
        },
        warnings=report.warnings,
    )


@click.command("stats")
@click.argument("path", type=COLLECTION_PATH)
@click.pass_context
@cli_command("stats")
def stats_cmd(ctx: click.Context, path: Path) -> None:
    """Show task statistics and the tasks ready to start."""
    collection = get_context(ctx).store.load(path)
    stats = task_statistics(collection.tasks)
    stats["ready_task_ids"] = [task.id for task in ready_tasks(collection.tasks)]
    stats["next_task_id"] = next_task_id(collection.tasks)
    emit_success(stats)


@click.command("analyze")
@click.argument("path", type=COLLECTION_PATH)
@click.pass_context
@cli_command("analyze")
def analyze_cmd(ctx: click.Context, path: Path) -> None:
    """Report housekeeping opportunities for PATH.

    Integrity rules are relaxed for this command so duplicate ids, orphaned
    subtasks and cycles are reported instead of rejected.
    """
    config = get_context(ctx).config
    lenient = CollectionStore(merge_config(config, {"enable_integrity_checks": False}))
    collection = lenient.read(path)
    report = analyze_collection(collection, config)
    data = report.to_dict()
    data["path"] = str(path)
    data["file_size_bytes"] = path.stat().st_size
    emit_success(data)


@click.command("search")
@click.argument("path", type=COLLECTION_PATH)
@click.option("--title", default=None, help="Every token must appear in the title.")
@click.option("--description", default=None, help="Every token must appear in the description.")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TaskStatus]),
    default=None,
    help="Exact status.",
)
@click.option(
    "--priority",
    type=click.Choice([p.value for p in TaskPriority]),
    default=None,
    help="Exact priority.",
)
@click.option("--tag", "tags", multiple=True, help="Match any of the given tags (repeatable).")
@click.pass_context
@cli_command("search")
def search_cmd(
    ctx: click.Context,
    path: Path,
    title: Optional[str],
    description: Optional[str],
    status: Optional[str],
    priority: Optional[str],
    tags: Tuple[str, ...],
) -> None:
    """Search the collection at PATH; all given criteria must match."""
    collection = get_context(ctx).store.load(path)
    indexer = TaskIndexer()
    indexer.build(collection.tasks)
    ids = indexer.search(
        title=title,
        description=description,
        status=status,
        priority=priority,
        tags=list(tags) if tags else None,
    )
    matches = [
        {"id": task.id, "title": task.title, "status": task.status.value}
        for task in (collection.get_task(task_id) for task_id in ids)
        if task is not None
    ]
    logger.debug("Search matched %d task(s)", len(ids))
    emit_success({"task_ids": ids, "tasks": matches, "count": len(ids)})
