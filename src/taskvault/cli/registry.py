"""Per-invocation CLI context."""

from dataclasses import dataclass

import click

from taskvault.config import EngineConfig
from taskvault.core.storage import CollectionStore


@dataclass
class CliContext:
    config: EngineConfig
    store: CollectionStore


def get_context(ctx: click.Context) -> CliContext:
    """Return the context object created by the root ``cli`` group."""
    obj = ctx.find_object(CliContext)
    if obj is None:
        raise click.UsageError("taskvault context is not initialised")
    return obj
