"""EndNote XML generator.

Builds the document with ElementTree, so text is escaped by the
serializer::

    <?xml version="1.0" encoding="UTF-8"?>
    <xml>
      <records>
        <record>
          <ref-type name="Journal Article">17</ref-type>
          ...
        </record>
      </records>
    </xml>
"""

import logging
import xml.etree.ElementTree as ET

from bibconv.core.dates import serialize_date
from bibconv.core.entry_types import (
    ENDNOTE_TO_CSL,
    ENDNOTE_TYPE_CODES,
    denormalize_from_csl_type,
)
from bibconv.core.fields import BibFormat, endnote_element_for
from bibconv.core.models import Entry
from bibconv.core.names import serialize_name

from .base import DEFAULT_OPTIONS, GeneratorOptions, ordered, text_value

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

CONTRIBUTORS = [
    ("author", "authors"),
    ("editor", "secondary-authors"),
    ("translator", "translated-authors"),
]

TITLES = [
    ("title", "title"),
    ("container-title", "secondary-title"),
    ("collection-title", "tertiary-title"),
    ("title-short", "short-title"),
]

# Single-valued fields written as direct children of <record>
SIMPLE_FIELDS = [
    "page",
    "volume",
    "issue",
    "chapter-number",
    "edition",
    "event",
    "event-place",
    "publisher",
    "publisher-place",
    "ISBN",
    "PMID",
    "DOI",
    "call-number",
    "genre",
    "language",
    "abstract",
    "note",
    "annote",
]


def _child(parent: ET.Element, tag: str, text: str | None = None, **attrib):
    element = ET.SubElement(parent, tag, attrib)
    if text is not None:
        element.text = text
    return element


class EndnoteXmlGenerator:
    """Generator for EndNote XML."""

    format = BibFormat.ENDNOTE

    def generate(
        self, entries: list[Entry], options: GeneratorOptions | None = None
    ) -> str:
        options = options or DEFAULT_OPTIONS
        root = ET.Element("xml")
        records = ET.SubElement(root, "records")
        for entry in ordered(entries, options):
            records.append(self.encode_entry(entry, options))

        ET.indent(root, space=options.indent)
        body = ET.tostring(root, encoding="unicode")
        logger.debug(f"Generated {len(records)} EndNote records")
        text = f"{XML_DECLARATION}\n{body}\n"
        return text.replace("\n", options.line_ending)

    def native_type(self, entry: Entry) -> str:
        original = (
            entry.format_metadata.original_type if entry.format_metadata else None
        )
        if original and entry.source == BibFormat.ENDNOTE:
            if ENDNOTE_TO_CSL.get(original.strip().lower()) == entry.type:
                return original.strip()
        return denormalize_from_csl_type(entry.type, BibFormat.ENDNOTE).type

    def encode_entry(self, entry: Entry, options: GeneratorOptions) -> ET.Element:
        """Build one ``<record>`` element."""
        record = ET.Element("record")
        ref_type = self.native_type(entry)
        _child(
            record,
            "ref-type",
            str(ENDNOTE_TYPE_CODES.get(ref_type, 0)),
            name=ref_type,
        )

        groups = [(tag, entry.get(field)) for field, tag in CONTRIBUTORS]
        groups = [(tag, names) for tag, names in groups if names]
        if groups:
            contributors = _child(record, "contributors")
            for tag, names in groups:
                group = _child(contributors, tag)
                for name in names:
                    _child(group, "author", serialize_name(name, "ris"))

        titles = [(tag, text_value(entry.get(field))) for field, tag in TITLES]
        titles = [(tag, text) for tag, text in titles if text]
        if titles:
            element = _child(record, "titles")
            for tag, text in titles:
                _child(element, tag, text)

        for csl_field in SIMPLE_FIELDS:
            text = text_value(entry.get(csl_field))
            tag = endnote_element_for(csl_field)
            if text and tag:
                _child(record, tag, text)
        if entry.issn and not entry.isbn:
            _child(record, "isbn", entry.issn)

        if entry.keyword:
            keywords = _child(record, "keywords")
            for keyword in entry.keyword.split(";"):
                if keyword.strip():
                    _child(keywords, "keyword", keyword.strip())

        if entry.issued is not None:
            dates = _child(record, "dates")
            if entry.issued.year is not None:
                _child(dates, "year", str(entry.issued.year))
            elif entry.issued.text:
                _child(dates, "year", entry.issued.text)
            if entry.issued.month is not None:
                pub_dates = _child(dates, "pub-dates")
                _child(pub_dates, "date", serialize_date(entry.issued))

        if entry.accessed is not None:
            text = serialize_date(entry.accessed)
            if text:
                _child(record, "access-date", text)

        urls = [entry.url] if entry.url else []
        custom = (
            dict(entry.custom_fields)
            if options.include_custom_fields and entry.source == BibFormat.ENDNOTE
            else {}
        )
        extra_urls = custom.pop("urls", [])
        urls.extend(u for u in extra_urls if isinstance(u, str))
        if urls:
            related = _child(_child(record, "urls"), "related-urls")
            for url in urls:
                _child(related, "url", url)

        for tag, value in custom.items():
            text = text_value(value)
            if text is not None:
                _child(record, tag, text)

        return record
