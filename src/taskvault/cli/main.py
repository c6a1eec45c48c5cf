"""Root click group for the ``taskvault`` command."""

from pathlib import Path
from typing import Optional

import click

from taskvault import __version__
from taskvault.cli.commands import (
    analyze_cmd,
    archive_cmd,
    config_group,
    merge_cmd,
    search_cmd,
    split_cmd,
    stats_cmd,
    transition_cmd,
    validate_cmd,
    watch_cmd,
)
from taskvault.cli.logging import LOG_LEVELS, configure_logging, get_cli_logger
from taskvault.cli.output import emit_response
from taskvault.cli.registry import CliContext
from taskvault.config import load_config
from taskvault.core.errors import ConfigValidationError
from taskvault.core.responses import error_from_exception
from taskvault.core.storage import CollectionStore

logger = get_cli_logger()


@click.group()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="TOML file with an [engine] table (default: ./taskvault.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum level for log messages written to stderr.",
)
@click.version_option(__version__, prog_name="taskvault")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], log_level: str) -> None:
    """Validate, split, merge and search task collection files."""
    configure_logging(log_level)
    try:
        config = load_config(config_file)
    except ConfigValidationError as exc:
        emit_response(error_from_exception(exc))
    logger.debug("Effective config: %s", config.model_dump())
    ctx.obj = CliContext(config=config, store=CollectionStore(config))


cli.add_command(validate_cmd)
cli.add_command(stats_cmd)
cli.add_command(analyze_cmd)
cli.add_command(search_cmd)
cli.add_command(split_cmd)
cli.add_command(merge_cmd)
cli.add_command(archive_cmd)
cli.add_command(transition_cmd)
cli.add_command(watch_cmd)
cli.add_command(config_group)


if __name__ == "__main__":
    cli()
