"""Shared parser contract and helpers."""

import re
from collections.abc import Iterable, Iterator
from typing import Any, Protocol

from bibconv.core.entry_types import CslType
from bibconv.core.fields import BibFormat
from bibconv.core.models import (
    CSL_ATTRIBUTES,
    ConversionResult,
    ConversionWarning,
    Entry,
    FormatMetadata,
    Name,
    PartialDate,
    Severity,
    WarningType,
)

# entryId of warnings that concern the whole document
DOCUMENT_ID = "unknown"

NO_ENTRIES_MESSAGE = "No entries found"

# Types whose serial number (RIS SN, EndNote isbn) is an ISSN
SERIAL_TYPES = frozenset(
    {
        CslType.ARTICLE,
        CslType.ARTICLE_JOURNAL,
        CslType.ARTICLE_MAGAZINE,
        CslType.ARTICLE_NEWSPAPER,
        CslType.REVIEW,
        CslType.REVIEW_BOOK,
    }
)


class Parser(Protocol):
    """Turns the text of one format into intermediate entries."""

    format: BibFormat

    def parse(self, content: str) -> ConversionResult:
        """Parse a document; never raises."""
        ...

    def validate(self, content: str) -> list[ConversionWarning]:
        """Check syntax only; never raises and never mutates."""
        ...


def error(
    entry_id: str,
    message: str,
    type: WarningType = WarningType.PARSE_ERROR,
    field: str | None = None,
) -> ConversionWarning:
    return ConversionWarning(
        entry_id=entry_id,
        severity=Severity.ERROR,
        type=type,
        message=message,
        field=field,
    )


def warning(
    entry_id: str,
    message: str,
    type: WarningType = WarningType.PARSE_ERROR,
    field: str | None = None,
) -> ConversionWarning:
    return ConversionWarning(
        entry_id=entry_id,
        severity=Severity.WARNING,
        type=type,
        message=message,
        field=field,
    )


def no_entries_warning() -> ConversionWarning:
    return warning(DOCUMENT_ID, NO_ENTRIES_MESSAGE, WarningType.VALIDATION_ERROR)


def document_error(message: str) -> ConversionResult:
    """Result for a document that could not be read at all."""
    return ConversionResult.build([], [error(DOCUMENT_ID, message)], failed=0)


def build_entry(
    entry_id: str,
    entry_type: CslType,
    fields: dict[str, Any],
    metadata: FormatMetadata | None = None,
) -> Entry:
    """Create an entry from values keyed by CSL field name.

    Values must already have their model types (names as tuples of
    :class:`Name`, dates as :class:`PartialDate`). Empty values are
    dropped; names without a typed attribute go to ``extra``.
    """
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for csl_field, value in fields.items():
        if value is None or value == "" or value == ():
            continue
        attr = CSL_ATTRIBUTES.get(csl_field)
        if attr is None or attr in ("extra", "format_metadata"):
            extra[csl_field] = value
        else:
            kwargs[attr] = value
    return Entry(
        id=entry_id,
        type=entry_type,
        extra=extra,
        format_metadata=metadata,
        **kwargs,
    )


def _id_stem(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def derive_id(
    authors: Iterable[Name] | None, issued: PartialDate | None, index: int
) -> str:
    """Id for formats without explicit keys.

    First author's family name (lowercased, whitespace removed) followed by
    the year; the family name alone without a year; ``entry<index+1>``
    without authors.
    """
    first = next(iter(authors or ()), None)
    stem = _id_stem(first.sort_name) if first else ""
    if not stem:
        return f"entry{index + 1}"
    year = issued.year if issued else None
    return f"{stem}{year}" if year is not None else stem


class IdAllocator:
    """Hands out ids unique within one parse result.

    A repeated id gets a letter suffix: ``smith2024``, ``smith2024b``,
    ``smith2024c``.
    """

    def __init__(self):
        self.used: set[str] = set()

    def allocate(self, candidate: str) -> str:
        if candidate not in self.used:
            self.used.add(candidate)
            return candidate

        unique = next(
            f"{candidate}{suffix}"
            for suffix in _suffixes()
            if f"{candidate}{suffix}" not in self.used
        )
        self.used.add(unique)
        return unique


def _suffixes() -> Iterator[str]:
    letters = "bcdefghijklmnopqrstuvwxyz"
    yield from letters
    n = 2
    while True:
        yield f"z{n}"
        n += 1
