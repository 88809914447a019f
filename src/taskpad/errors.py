"""Error types raised by the task and project stores."""


class TaskpadError(Exception):
    """Base class for all taskpad errors."""

    pass


class ValidationError(TaskpadError, ValueError):
    """Raised when a record is missing a required field or holds a bad value."""

    pass


class NotFoundError(TaskpadError, LookupError):
    """Raised when an id matches no record in its collection."""

    pass


class StorageError(TaskpadError):
    """Raised when the key-value store cannot be read or written."""

    pass
