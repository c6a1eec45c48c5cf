"""CLI logging setup and the command wrapper.

Logs go to stderr so stdout only ever carries the JSON envelope.
"""

import functools
import logging
import sys
import time
from typing import Any, Callable, TypeVar

from taskvault.core.errors import TaskVaultError

F = TypeVar("F", bound=Callable[..., Any])

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Marks handlers installed here so a repeated setup replaces rather than stacks them
_CLI_HANDLER_FLAG = "_taskvault_cli"


def get_cli_logger() -> logging.Logger:
    return logging.getLogger("taskvault.cli")


def configure_logging(level: str = "WARNING") -> None:
    """Send ``taskvault`` logs at ``level`` and above to stderr."""
    package_logger = logging.getLogger("taskvault")
    for handler in list(package_logger.handlers):
        if getattr(handler, _CLI_HANDLER_FLAG, False):
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _CLI_HANDLER_FLAG, True)
    package_logger.addHandler(handler)
    package_logger.setLevel(level.upper())


def cli_command(name: str) -> Callable[[F], F]:
    """
    Wrap a command so library errors become error envelopes.

    Any ``TaskVaultError`` escaping the command is rendered through
    ``error_from_exception`` and exits with status 1.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            from taskvault.cli.output import emit_response
            from taskvault.core.responses import error_from_exception

            logger = get_cli_logger()
            started = time.perf_counter()
            logger.debug("Running command %s", name)
            try:
                return func(*args, **kwargs)
            except TaskVaultError as exc:
                logger.debug("Command %s failed: %s", name, exc)
                emit_response(error_from_exception(exc))
            finally:
                logger.debug(
                    "Command %s finished in %.1fms", name, (time.perf_counter() - started) * 1000
                )

        return wrapper  # type: ignore[return-value]

    return decorator
