"""Exceptions raised inside bibconv.

Parsers never let these escape ``parse()`` or ``validate()``; they are
turned into :class:`~bibconv.core.models.ConversionWarning` objects at the
record boundary.
"""

from __future__ import annotations

from dataclasses import dataclass


class BibconvError(Exception):
    """Base class for bibconv errors."""


@dataclass
class RecordSyntaxError(BibconvError):
    """Syntax error inside one record, with location."""

    message: str
    line: int = 0
    column: int = 0
    key: str | None = None

    def __str__(self) -> str:
        if self.line:
            return f"Line {self.line}, column {self.column}: {self.message}"
        return self.message


class UnsupportedFormatError(BibconvError, ValueError):
    """Requested format has no parser or generator."""

    def __init__(self, fmt: object):
        self.format = fmt
        super().__init__(f"Unsupported format: {fmt}")


class FormatDetectionError(BibconvError):
    """Content format could not be determined unambiguously."""

    def __init__(self, message: str = "Could not detect input format"):
        super().__init__(message)
