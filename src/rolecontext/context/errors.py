"""Error taxonomy for context loading.

Only filesystem problems are errors. Parsing never rejects input.
"""

from __future__ import annotations


class ContextError(Exception):
    """Base class for context loading failures."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(ContextError):
    """File or directory does not exist."""


class PermissionDeniedError(ContextError):
    """File or directory exists but cannot be read."""


class ContextIOError(ContextError):
    """Any other read failure."""


def translate_os_error(exc: Exception, path: str) -> ContextError:
    """Map an OSError (or a decode failure) onto the context error taxonomy."""
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(f"Not found: {path}", path)
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(f"Permission denied: {path}", path)
    reason = getattr(exc, "strerror", None) or exc
    return ContextIOError(f"Cannot read {path}: {reason}", path)
