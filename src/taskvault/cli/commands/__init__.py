"""CLI commands, grouped by concern."""

from taskvault.cli.commands.collection import analyze_cmd, search_cmd, stats_cmd, validate_cmd
from taskvault.cli.commands.config import config_group
from taskvault.cli.commands.partition import archive_cmd, merge_cmd, split_cmd
from taskvault.cli.commands.status import transition_cmd
from taskvault.cli.commands.watch import watch_cmd

__all__ = [
    "analyze_cmd",
    "archive_cmd",
    "config_group",
    "merge_cmd",
    "search_cmd",
    "split_cmd",
    "stats_cmd",
    "transition_cmd",
    "validate_cmd",
    "watch_cmd",
]
