"""Exception types shared across mnemo.

Not-found conditions are never raised: operations return ``None`` and callers
treat that as ordinary data.
"""

import re

_PATH_PATTERN = re.compile(r"(?:[A-Za-z]:\\|~?/)[^\s'\"]*")
_SQL_PATTERN = re.compile(
    r"\b(?:SELECT|INSERT|UPDATE|DELETE|CREATE|DROP|ALTER|PRAGMA)\s.*",
    re.DOTALL,
)

GENERIC_STORAGE_MESSAGE = "Storage operation failed"


class MnemoError(Exception):
    """Base class for mnemo errors."""


class InvalidArgumentsError(MnemoError):
    """Malformed or unsupported arguments supplied by a caller."""


class StorageError(MnemoError):
    """Engine-level I/O or constraint failure.

    The message is always generic. The underlying ``sqlite3.Error`` is
    available as ``__cause__`` and is logged where it is raised.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{GENERIC_STORAGE_MESSAGE}: {operation}")


class ConfigError(MnemoError):
    """Configuration loading or validation error."""


def sanitize_error_message(error: BaseException) -> str:
    """Return a client-safe message for an exception.

    File-system paths are replaced with ``<path>`` and anything from the first
    SQL keyword onwards is dropped.

    Args:
        error: Exception to describe

    Returns:
        Message safe to include in a tool response
    """
    if isinstance(error, StorageError):
        return str(error)

    message = str(error) or type(error).__name__
    message = _SQL_PATTERN.sub("<query>", message)
    message = _PATH_PATTERN.sub("<path>", message)
    return message.strip() or type(error).__name__
