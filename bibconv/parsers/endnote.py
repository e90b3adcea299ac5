"""EndNote XML parser.

Format::

    <xml>
      <records>
        <record>
          <ref-type name="Journal Article">17</ref-type>
          <contributors>
            <authors><author>Smith, John</author></authors>
          </contributors>
          <titles><title>Article Title</title></titles>
          <dates><year>2024</year></dates>
        </record>
      </records>
    </xml>

Text is often wrapped in ``<style>`` elements; only the character data is
kept.
"""

import logging
import xml.etree.ElementTree as ET

from bibconv.core.dates import parse_date
from bibconv.core.entry_types import (
    ENDNOTE_TYPE_CODES,
    is_known_native_type,
    normalize_to_csl_type,
)
from bibconv.core.fields import BibFormat, csl_field_from_endnote
from bibconv.core.models import (
    ConversionResult,
    ConversionWarning,
    Entry,
    FormatMetadata,
    PartialDate,
    WarningType,
)
from bibconv.core.names import parse_name

from .base import (
    DOCUMENT_ID,
    SERIAL_TYPES,
    IdAllocator,
    build_entry,
    derive_id,
    document_error,
    error,
    no_entries_warning,
    warning,
)

logger = logging.getLogger(__name__)

DEFAULT_REF_TYPE = "Journal Article"

TYPE_NAMES_BY_CODE = {str(code): name for name, code in ENDNOTE_TYPE_CODES.items()}

# Record bookkeeping that has no bibliographic meaning
IGNORED_ELEMENTS = frozenset(
    {"database", "source-app", "rec-number", "foreign-keys", "ref-type"}
)


def element_text(element: ET.Element | None) -> str:
    """Character data of an element and its ``<style>`` children."""
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def _ref_type(record: ET.Element) -> str:
    ref_type = record.find("ref-type")
    if ref_type is None:
        return DEFAULT_REF_TYPE
    name = ref_type.get("name")
    if name:
        return name
    return TYPE_NAMES_BY_CODE.get(element_text(ref_type), DEFAULT_REF_TYPE)


def _issued(dates: ET.Element | None) -> PartialDate | None:
    """Publication date from ``<year>`` refined by ``<pub-dates><date>``."""
    if dates is None:
        return None
    year_text = element_text(dates.find("year"))
    date_text = element_text(dates.find("pub-dates/date"))

    issued = parse_date(year_text)
    if date_text:
        detailed = parse_date(date_text)
        if detailed is None or detailed.month is None:
            detailed = parse_date(f"{date_text} {year_text}".strip())
        if detailed is not None and detailed.month is not None:
            if issued is None or issued.year in (None, detailed.year):
                issued = detailed
    return issued


class EndnoteXmlParser:
    """Parser for EndNote XML exports."""

    format = BibFormat.ENDNOTE

    def parse(self, content: str) -> ConversionResult:
        if not content or not content.strip():
            return ConversionResult.build([], [], failed=0)

        try:
            root = ET.fromstring(content.lstrip("\ufeff"))
        except ET.ParseError as e:
            logger.warning(f"XML parse error: {e}")
            return document_error(f"XML parse error: {e}")

        ids = IdAllocator()
        entries: list[Entry] = []
        warnings: list[ConversionWarning] = []
        for index, record in enumerate(root.iter("record")):
            entry, notes = self.build(record, index, ids)
            entries.append(entry)
            warnings.extend(notes)

        logger.debug(f"Parsed {len(entries)} EndNote records")
        return ConversionResult.build(entries, warnings, failed=0)

    def build(
        self, record: ET.Element, index: int, ids: IdAllocator
    ) -> tuple[Entry, list[ConversionWarning]]:
        ref_type = _ref_type(record)
        csl_type = normalize_to_csl_type(ref_type, BibFormat.ENDNOTE)

        values: dict[str, object] = {}
        custom: dict[str, object] = {}

        def put(element: str, value: object) -> None:
            csl_field = csl_field_from_endnote(element)
            if csl_field is None or csl_field in values:
                custom[element] = value
            else:
                values[csl_field] = value

        for child in record:
            tag = child.tag
            if tag in IGNORED_ELEMENTS:
                continue

            if tag == "contributors":
                for group in child:
                    parsed = (
                        parse_name(element_text(a), suffix_last=True)
                        for a in group.findall("author")
                    )
                    names = tuple(n for n in parsed if n is not None)
                    if names:
                        put(group.tag, names)
            elif tag == "titles":
                for title in child:
                    text = element_text(title)
                    if text:
                        put(title.tag, text)
            elif tag == "periodical":
                text = element_text(child.find("full-title"))
                if text and "container-title" not in values:
                    values["container-title"] = text
            elif tag == "dates":
                issued = _issued(child)
                if issued is not None:
                    values["issued"] = issued
            elif tag == "urls":
                urls = [element_text(u) for u in child.iter("url")]
                urls = [u for u in urls if u]
                if urls:
                    values["URL"] = urls[0]
                if len(urls) > 1:
                    custom["urls"] = urls[1:]
            elif tag == "keywords":
                keywords = [element_text(k) for k in child.findall("keyword")]
                keywords = [k for k in keywords if k]
                if keywords:
                    values["keyword"] = "; ".join(keywords)
            elif tag == "access-date":
                values["accessed"] = parse_date(element_text(child))
            elif tag == "isbn":
                text = element_text(child)
                if text:
                    values["ISSN" if csl_type in SERIAL_TYPES else "ISBN"] = text
            else:
                text = element_text(child)
                if text:
                    put(tag, text)

        entry_id = ids.allocate(
            derive_id(values.get("author"), values.get("issued"), index)
        )

        notes = []
        if not is_known_native_type(ref_type, BibFormat.ENDNOTE):
            notes.append(
                warning(
                    entry_id,
                    f"Unknown EndNote type '{ref_type}', using '{csl_type.value}'",
                    WarningType.TYPE_DOWNGRADE,
                )
            )

        metadata = FormatMetadata(
            source=BibFormat.ENDNOTE,
            original_type=ref_type,
            custom_fields=custom,
        )
        return build_entry(entry_id, csl_type, values, metadata), notes

    def validate(self, content: str) -> list[ConversionWarning]:
        """Check that the document is well-formed XML with records."""
        if not content or not content.strip():
            return [no_entries_warning()]

        try:
            root = ET.fromstring(content.lstrip("\ufeff"))
        except ET.ParseError as e:
            return [error(DOCUMENT_ID, f"XML parse error: {e}")]

        warnings = []
        records = list(root.iter("record"))
        for index, record in enumerate(records):
            if record.find("ref-type") is None:
                warnings.append(
                    warning(
                        f"record-{index}",
                        f"Record {index + 1} has no ref-type, "
                        f"assuming '{DEFAULT_REF_TYPE}'",
                        WarningType.VALIDATION_ERROR,
                    )
                )

        if not records:
            warnings.append(no_entries_warning())
        return warnings
