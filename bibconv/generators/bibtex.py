"""BibTeX generation.

Produces entries of the form::

    @article{smith2024,
      author = {Smith, John},
      title = {Test Article},
      journal = {Nature},
      year = {2024},
      month = mar
    }

Field values are LaTeX-encoded and braced; month macros stay bare.
"""

import logging
import re
from typing import Any

from bibconv.core.dates import MONTH_MACROS, serialize_bibtex_date, serialize_date
from bibconv.core.entry_types import (
    BIBLATEX_TO_CSL,
    BIBTEX_TO_CSL,
    denormalize_from_csl_type,
)
from bibconv.core.fields import (
    BIBTEX_FAMILY,
    FIELD_MAPPINGS,
    BibFormat,
    Transform,
    bibtex_field_for,
)
from bibconv.core.latex import encode_latex, encode_verbatim, escape_stray_braces
from bibconv.core.models import Entry, PartialDate
from bibconv.core.names import serialize_names

from .base import DEFAULT_OPTIONS, GeneratorOptions, ordered, text_value

logger = logging.getLogger(__name__)

# Conventional order of canonical fields; others follow alphabetically
FIELD_ORDER = [
    "author",
    "editor",
    "translator",
    "title",
    "title-short",
    "container-title",
    "collection-title",
    "event",
    "issued",
    "volume",
    "issue",
    "page",
    "chapter-number",
    "number-of-pages",
    "edition",
    "publisher",
    "publisher-place",
    "event-place",
    "genre",
    "medium",
    "note",
    "DOI",
    "URL",
    "accessed",
    "ISBN",
    "ISSN",
    "PMID",
    "language",
    "call-number",
    "abstract",
    "keyword",
    "annote",
]

VERBATIM_FIELDS = frozenset({"DOI", "URL"})

MONTH_NAMES = frozenset(MONTH_MACROS.values())

PAGE_DASH = re.compile(r"(?<=\w)\s*(?:-+|–|—)\s*(?=\w)")

_SKIPPED = frozenset({"id", "type", "_extra", "_formatMetadata"})


def _native_types(dialect: BibFormat) -> dict:
    return BIBLATEX_TO_CSL if dialect == BibFormat.BIBLATEX else BIBTEX_TO_CSL


class BibtexGenerator:
    """Generator for BibTeX text."""

    format = BibFormat.BIBTEX

    def generate(
        self, entries: list[Entry], options: GeneratorOptions | None = None
    ) -> str:
        options = options or DEFAULT_OPTIONS
        blocks = [self.encode_entry(e, options) for e in ordered(entries, options)]
        if not blocks:
            return ""
        logger.debug(f"Generated {len(blocks)} {self.format.value} entries")
        separator = options.line_ending * 2
        return separator.join(blocks) + options.line_ending

    def native_type(self, entry: Entry) -> str:
        """Native entry type, reusing the source type when it round-trips."""
        original = (
            entry.format_metadata.original_type if entry.format_metadata else None
        )
        if original and entry.source in BIBTEX_FAMILY:
            key = original.strip().lower()
            if _native_types(self.format).get(key) == entry.type:
                return key
        return denormalize_from_csl_type(entry.type, self.format).type

    def encode_entry(self, entry: Entry, options: GeneratorOptions) -> str:
        """Encode a single entry."""
        native_type = self.native_type(entry)
        fields = self.encode_fields(entry, native_type, options)

        lines = [f"@{native_type}{{{entry.id},"]
        lines.extend(
            f"{options.indent}{name} = {value}," for name, value in fields
        )
        if lines[-1].endswith(","):
            lines[-1] = lines[-1][:-1]
        lines.append("}")
        return options.line_ending.join(lines)

    def encode_fields(
        self, entry: Entry, native_type: str, options: GeneratorOptions
    ) -> list[tuple[str, str]]:
        """Native ``(field, rendered value)`` pairs in output order."""
        data = entry.to_csl()
        names = [f for f in FIELD_ORDER if f in data]
        names.extend(sorted(k for k in data if k not in FIELD_ORDER))

        fields: list[tuple[str, str]] = []
        emitted: set[str] = set()
        for csl_field in names:
            if csl_field in _SKIPPED:
                continue
            for native, value in self.encode_field(
                csl_field, entry.get(csl_field), native_type
            ):
                if native not in emitted:
                    emitted.add(native)
                    fields.append((native, value))

        if options.include_custom_fields and entry.source in BIBTEX_FAMILY:
            for native, value in entry.custom_fields.items():
                text = text_value(value)
                if text is None or native.lower() in emitted:
                    continue
                emitted.add(native.lower())
                fields.append((native.lower(), f"{{{escape_stray_braces(text)}}}"))

        return fields

    def encode_field(
        self, csl_field: str, value: Any, native_type: str
    ) -> list[tuple[str, str]]:
        """Render one canonical field; empty when the dialect has no slot."""
        if value is None:
            return []

        native = bibtex_field_for(csl_field, native_type, self.format)
        if native is None:
            return []

        mapping = FIELD_MAPPINGS.get(csl_field)
        transform = mapping.transform if mapping else None

        if transform == Transform.NAME:
            if not isinstance(value, tuple) or not value:
                return []
            return [(native, f"{{{encode_latex(serialize_names(value))}}}")]

        if transform == Transform.DATE:
            if not isinstance(value, PartialDate):
                return []
            return self.encode_date(csl_field, native, value)

        text = text_value(value)
        if text is None:
            return []
        if csl_field in VERBATIM_FIELDS:
            return [(native, f"{{{encode_verbatim(text)}}}")]
        if transform == Transform.PAGE_RANGE:
            text = PAGE_DASH.sub("--", text)
        return [(native, f"{{{encode_latex(text)}}}")]

    def encode_date(
        self, csl_field: str, native: str, date: PartialDate
    ) -> list[tuple[str, str]]:
        if csl_field != "issued":
            text = escape_stray_braces(serialize_date(date))
            return [(native, f"{{{text}}}")] if text else []

        parts = serialize_bibtex_date(date)
        fields = []
        if "year" in parts:
            fields.append(("year", f"{{{escape_stray_braces(parts['year'])}}}"))
        if "month" in parts:
            month = parts["month"]
            fields.append(
                ("month", month if month in MONTH_NAMES else f"{{{month}}}")
            )
        if "day" in parts:
            fields.append(("day", f"{{{parts['day']}}}"))
        return fields
