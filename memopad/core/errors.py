from __future__ import annotations

__all__ = ["MemoError", "NotFound", "InvalidInput", "PersistenceUnavailable"]


class MemoError(Exception):
    """Base class for memo store errors."""


class NotFound(MemoError, LookupError):
    """An id is absent from the partition an operation looked in."""


class InvalidInput(MemoError, ValueError):
    """Rejected input, e.g. a blank folder name or a move that would create a cycle."""


class PersistenceUnavailable(MemoError, OSError):
    """The key-value backend could not be read or written."""
