"""Root of the taskvault exception hierarchy."""


class TaskVaultError(Exception):
    """Base class for every error raised by taskvault."""

    pass
