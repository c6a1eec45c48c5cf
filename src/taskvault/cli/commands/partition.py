"""Commands that rewrite collection files: split, merge, archive."""

from pathlib import Path
from typing import Tuple

import click

from taskvault.cli.logging import cli_command, get_cli_logger
from taskvault.cli.output import emit_success
from taskvault.cli.registry import get_context
from taskvault.core.analysis import archive_completed
from taskvault.core.partition import PartitionManager

logger = get_cli_logger()


@click.command("split")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--output-dir",
    required=True,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for tasks-chunk-N.json files.",
)
@click.pass_context
@cli_command("split")
def split_cmd(ctx: click.Context, path: Path, output_dir: Path) -> None:
    """Split PATH into chunk files when it exceeds the chunk size."""
    cli_ctx = get_context(ctx)
    paths = PartitionManager(cli_ctx.store).split(path, output_dir)
    split = paths != [path]
    emit_success(
        {
            "split": split,
            "chunk_size": cli_ctx.config.chunk_size,
            "paths": [str(p) for p in paths],
        }
    )


@click.command("merge")
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to write the merged collection to.",
)
@click.pass_context
@cli_command("merge")
def merge_cmd(ctx: click.Context, paths: Tuple[Path, ...], output_path: Path) -> None:
    """Merge PATHS into one collection, newest copy of each task winning."""
    merged = PartitionManager(get_context(ctx).store).merge(list(paths), output_path)
    emit_success(
        {
            "output": str(output_path),
            "inputs": [str(p) for p in paths],
            "project_name": merged.metadata.project_name,
            "total_tasks": len(merged.tasks),
            "checksum": merged.metadata.checksum,
        }
    )


@click.command("archive")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "--archive",
    "archive_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Archive collection to move completed tasks into.",
)
@click.pass_context
@cli_command("archive")
def archive_cmd(ctx: click.Context, path: Path, archive_path: Path) -> None:
    """Move done tasks from PATH into the archive collection."""
    result = archive_completed(get_context(ctx).store, path, archive_path)
    data = result.to_dict()
    data["archive"] = str(archive_path)
    emit_success(data)
