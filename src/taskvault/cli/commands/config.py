"""Configuration commands."""

import click

from taskvault.cli.logging import cli_command
from taskvault.cli.output import emit_success
from taskvault.cli.registry import get_context


@click.group("config")
def config_group() -> None:
    """Inspect the effective engine configuration."""


@config_group.command("show")
@click.pass_context
@cli_command("config show")
def config_show_cmd(ctx: click.Context) -> None:
    """Print the configuration after file and environment overrides."""
    config = get_context(ctx).config
    emit_success({"config": config.model_dump(), "env": config.to_env()})
