"""RIS (Research Information Systems) parser.

RIS is line oriented::

    TY  - JOUR
    AU  - Smith, John
    TI  - Article Title
    PY  - 2024
    ER  -

``TY`` opens a record and ``ER`` closes it. A ``TY`` seen while a record
is still open closes that record silently; only :meth:`RisParser.validate`
complains about it. Lines that are not ``XX  - value`` tags are skipped.
"""

import logging
import re
from dataclasses import dataclass, field

from bibconv.core.dates import parse_ris_date
from bibconv.core.entry_types import is_known_native_type, normalize_to_csl_type
from bibconv.core.fields import BibFormat, csl_field_from_ris
from bibconv.core.models import (
    ConversionResult,
    ConversionWarning,
    Entry,
    FormatMetadata,
    WarningType,
)
from bibconv.core.names import parse_name

from .base import (
    DOCUMENT_ID,
    SERIAL_TYPES,
    IdAllocator,
    build_entry,
    derive_id,
    no_entries_warning,
    warning,
)

logger = logging.getLogger(__name__)

TAG_LINE = re.compile(r"^([A-Z][A-Z0-9])\s*-\s?(.*)$")

NAME_TAGS = {
    "AU": "author",
    "A1": "author",
    "ED": "editor",
    "A2": "editor",
    "A3": "translator",
}

# Tags handled outside the generic field loop
SPECIAL_TAGS = frozenset({"KW", "PY", "Y1", "Y2", "SP", "EP", "SN"})


@dataclass
class RisRecord:
    """Tag values of one record, in order of appearance."""

    type: str
    line: int
    fields: dict[str, list[str]] = field(default_factory=dict)

    def first(self, *tags: str) -> str | None:
        for tag in tags:
            values = self.fields.get(tag)
            if values:
                return values[0]
        return None


def split_records(content: str) -> list[RisRecord]:
    """Group tag lines into records."""
    records = []
    current: RisRecord | None = None

    for number, line in enumerate(content.splitlines(), start=1):
        match = TAG_LINE.match(line.strip())
        if not match:
            continue

        tag, value = match.group(1), match.group(2).strip()
        if tag == "TY":
            if current is not None:
                records.append(current)
            current = RisRecord(type=value, line=number)
        elif tag == "ER":
            if current is not None:
                records.append(current)
                current = None
        elif current is not None and value:
            current.fields.setdefault(tag, []).append(value)

    if current is not None:
        records.append(current)
    return records


class RisParser:
    """Parser for RIS text."""

    format = BibFormat.RIS

    def parse(self, content: str) -> ConversionResult:
        records = split_records((content or "").lstrip("\ufeff"))
        ids = IdAllocator()

        entries: list[Entry] = []
        warnings: list[ConversionWarning] = []
        for index, record in enumerate(records):
            entry, notes = self.build(record, index, ids)
            entries.append(entry)
            warnings.extend(notes)

        logger.debug(f"Parsed {len(entries)} RIS entries")
        return ConversionResult.build(entries, warnings, failed=0)

    def build(
        self, record: RisRecord, index: int, ids: IdAllocator
    ) -> tuple[Entry, list[ConversionWarning]]:
        csl_type = normalize_to_csl_type(record.type, BibFormat.RIS)

        values: dict[str, object] = {}
        custom: dict[str, list[str]] = {}
        names: dict[str, list] = {}

        for tag, tag_values in record.fields.items():
            if tag in NAME_TAGS:
                parsed = (parse_name(v, suffix_last=True) for v in tag_values)
                names.setdefault(NAME_TAGS[tag], []).extend(
                    n for n in parsed if n is not None
                )
                continue
            if tag in SPECIAL_TAGS:
                continue

            csl_field = csl_field_from_ris(tag)
            if csl_field is None or csl_field in values:
                custom[tag] = tag_values
                continue
            values[csl_field] = tag_values[0]
            if len(tag_values) > 1:
                custom[tag] = tag_values[1:]

        for csl_field, parsed_names in names.items():
            values[csl_field] = tuple(parsed_names)

        if "KW" in record.fields:
            values["keyword"] = "; ".join(record.fields["KW"])

        values["issued"] = parse_ris_date(record.first("PY", "Y1"))
        values["accessed"] = parse_ris_date(record.first("Y2"))

        start, end = record.first("SP"), record.first("EP")
        if start and end:
            values["page"] = f"{start}-{end}"
        elif start or end:
            values["page"] = start or end

        serial = record.first("SN")
        if serial:
            values["ISSN" if csl_type in SERIAL_TYPES else "ISBN"] = serial

        entry_id = ids.allocate(
            derive_id(values.get("author"), values.get("issued"), index)
        )

        notes = []
        if not is_known_native_type(record.type, BibFormat.RIS):
            notes.append(
                warning(
                    entry_id,
                    f"Unknown RIS type '{record.type}', using '{csl_type.value}'",
                    WarningType.TYPE_DOWNGRADE,
                )
            )

        metadata = FormatMetadata(
            source=BibFormat.RIS,
            original_type=record.type,
            custom_fields=custom,
        )
        return build_entry(entry_id, csl_type, values, metadata), notes

    def validate(self, content: str) -> list[ConversionWarning]:
        """Check tag syntax and TY/ER pairing."""
        warnings: list[ConversionWarning] = []
        entry_count = 0
        in_entry = False

        lines = (content or "").lstrip("\ufeff").splitlines()
        for number, raw_line in enumerate(lines, start=1):
            line = raw_line.strip()
            if not line:
                continue

            match = TAG_LINE.match(line)
            if not match:
                warnings.append(
                    warning(DOCUMENT_ID, f"Line {number}: Invalid RIS format")
                )
                continue

            tag = match.group(1)
            if tag == "TY":
                if in_entry:
                    warnings.append(
                        warning(
                            DOCUMENT_ID,
                            f"Line {number}: TY tag without ER tag to close "
                            "previous entry",
                            WarningType.VALIDATION_ERROR,
                        )
                    )
                in_entry = True
                entry_count += 1
            elif tag == "ER":
                if not in_entry:
                    warnings.append(
                        warning(
                            DOCUMENT_ID,
                            f"Line {number}: ER tag without matching TY tag",
                            WarningType.VALIDATION_ERROR,
                        )
                    )
                in_entry = False

        if in_entry:
            warnings.append(
                warning(
                    DOCUMENT_ID,
                    "Unclosed entry (missing ER tag)",
                    WarningType.VALIDATION_ERROR,
                )
            )

        if entry_count == 0:
            warnings.append(no_entries_warning())

        return warnings
