"""Exceptions raised by safebom.

ParseError covers everything wrong with the document itself.
SchemaResourceError covers a broken installation. Plain OSError from
reading a source is never wrapped, so callers can tell a bad document
from a bad environment.
"""

from typing import Optional


class ParseError(ValueError):
    """Raised when a document cannot be turned into a Bom."""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class SchemaResourceError(OSError):
    """Raised when a schema definition cannot be loaded or compiled."""
