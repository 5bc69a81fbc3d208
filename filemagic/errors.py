"""
Exception hierarchy raised by the magic session layer.
"""
from typing import Optional


class MagicError(Exception):
    """Base class for every failure reported by libmagic or its facade."""

    def __init__(self, message: Optional[str] = None, errno: Optional[int] = None):
        self.message = message or 'unknown libmagic error'
        self.errno = errno or None
        super().__init__(self.message)


class EngineUnavailable(MagicError):
    """libmagic could not allocate a cookie."""


class LibraryNotFound(EngineUnavailable):
    """The native libmagic shared object could not be located or loaded."""


class DatabaseLoadFailed(MagicError):
    """The requested (or default) magic database failed to load."""


class InvalidInput(MagicError, ValueError):
    """A path argument is blank or does not exist."""


class QueryFailed(MagicError):
    """libmagic returned a failure sentinel for a query."""


class SessionClosed(MagicError, RuntimeError):
    """An operation was attempted on a released session."""


class ParameterRejected(MagicError):
    """libmagic refused to read or write an engine parameter."""
