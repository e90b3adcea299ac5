"""RIS generator.

Each entry becomes a ``TY`` line, one line per tag value and a closing
``ER`` line. Repeated fields (names, keywords) repeat their tag.
"""

import logging
import re
from typing import Any

from bibconv.core.dates import serialize_ris_date
from bibconv.core.entry_types import RIS_TO_CSL, denormalize_from_csl_type
from bibconv.core.fields import BibFormat, ris_tag_for
from bibconv.core.models import Entry, PartialDate
from bibconv.core.names import serialize_name

from .base import DEFAULT_OPTIONS, GeneratorOptions, ordered, text_value

logger = logging.getLogger(__name__)

FIELD_ORDER = [
    "author",
    "editor",
    "translator",
    "title",
    "title-short",
    "container-title",
    "collection-title",
    "issued",
    "volume",
    "issue",
    "page",
    "chapter-number",
    "edition",
    "publisher",
    "publisher-place",
    "event",
    "event-place",
    "DOI",
    "ISBN",
    "ISSN",
    "PMID",
    "URL",
    "accessed",
    "genre",
    "medium",
    "language",
    "call-number",
    "abstract",
    "keyword",
    "note",
    "annote",
]

NAME_TAGS = {"author": "AU", "editor": "ED", "translator": "A3"}

DATE_TAGS = {"issued": "PY", "accessed": "Y2"}

PAGE_RANGE = re.compile(r"^\s*(\S+?)\s*(?:-+|–|—)\s*(\S+)\s*$")

KEYWORD_SEPARATOR = re.compile(r"[;,]")

_SKIPPED = frozenset({"id", "type", "_extra", "_formatMetadata"})


def tag_line(tag: str, value: str) -> str:
    return f"{tag}  - {value}"


class RisGenerator:
    """Generator for RIS text."""

    format = BibFormat.RIS

    def generate(
        self, entries: list[Entry], options: GeneratorOptions | None = None
    ) -> str:
        options = options or DEFAULT_OPTIONS
        records = [
            options.line_ending.join(self.encode_entry(entry, options))
            for entry in ordered(entries, options)
        ]
        if not records:
            return ""
        logger.debug(f"Generated {len(records)} RIS records")
        return options.line_ending.join(records) + options.line_ending

    def native_type(self, entry: Entry) -> str:
        original = (
            entry.format_metadata.original_type if entry.format_metadata else None
        )
        if original and entry.source == BibFormat.RIS:
            key = original.strip().upper()
            if RIS_TO_CSL.get(key) == entry.type:
                return key
        return denormalize_from_csl_type(entry.type, BibFormat.RIS).type

    def encode_entry(self, entry: Entry, options: GeneratorOptions) -> list[str]:
        """Lines of one record, ``TY`` through ``ER``."""
        lines = [tag_line("TY", self.native_type(entry))]

        data = entry.to_csl()
        names = [f for f in FIELD_ORDER if f in data]
        names.extend(sorted(k for k in data if k not in FIELD_ORDER))
        for csl_field in names:
            if csl_field not in _SKIPPED:
                lines.extend(self.encode_field(csl_field, entry.get(csl_field)))

        if options.include_custom_fields and entry.source == BibFormat.RIS:
            for tag, values in entry.custom_fields.items():
                if not isinstance(values, list):
                    values = [values]
                for value in values:
                    text = text_value(value)
                    if text is not None:
                        lines.append(tag_line(tag, text))

        lines.append("ER  - ")
        return lines

    def encode_field(self, csl_field: str, value: Any) -> list[str]:
        """Tag lines for one canonical field."""
        if value is None:
            return []

        if csl_field in NAME_TAGS:
            tag = NAME_TAGS[csl_field]
            return [tag_line(tag, serialize_name(name, "ris")) for name in value]

        if csl_field in DATE_TAGS:
            if not isinstance(value, PartialDate):
                return []
            text = serialize_ris_date(value)
            return [tag_line(DATE_TAGS[csl_field], text)] if text else []

        if csl_field == "keyword":
            keywords = (k.strip() for k in KEYWORD_SEPARATOR.split(str(value)))
            return [tag_line("KW", k) for k in keywords if k]

        if csl_field == "page":
            text = text_value(value)
            if text is None:
                return []
            match = PAGE_RANGE.match(text)
            if match:
                return [tag_line("SP", match.group(1)), tag_line("EP", match.group(2))]
            return [tag_line("SP", text)]

        tag = ris_tag_for(csl_field)
        text = text_value(value)
        if tag is None or text is None:
            return []
        # RIS values cannot span lines
        return [tag_line(tag, " ".join(text.split()))]
