"""Configuration error classes."""

from typing import List, Optional

from taskvault.core.errors.base import TaskVaultError


class ConfigValidationError(TaskVaultError):
    """Raised when configuration values fail validation.

    Attributes:
        problems: One entry per rejected field, formatted as ``field: message``.
    """

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.problems = list(problems or [])
        if self.problems:
            message = f"{message}:\n" + "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(message)
