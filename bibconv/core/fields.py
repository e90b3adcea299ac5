"""Field mappings between bibliography formats.

Every canonical (CSL) field name maps to the native field or tag name used
by each format, together with the transformation its value needs when it
crosses the boundary (name lists, dates, numbers, page ranges).
"""

from enum import Enum, unique

import msgspec


@unique
class BibFormat(str, Enum):
    """Supported bibliography formats."""

    BIBTEX = "bibtex"
    BIBLATEX = "biblatex"
    RIS = "ris"
    ENDNOTE = "endnote"
    CSL_JSON = "csl-json"

    @classmethod
    def coerce(cls, value: "BibFormat | str") -> "BibFormat":
        """Accept either a member or its string value."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


BIBTEX_FAMILY = frozenset({BibFormat.BIBTEX, BibFormat.BIBLATEX})


@unique
class Transform(str, Enum):
    """Value transformation needed when a field changes format."""

    NAME = "name"
    DATE = "date"
    NUMBER = "number"
    PAGE_RANGE = "page-range"


class FieldMapping(msgspec.Struct, frozen=True, kw_only=True):
    """Native names of one canonical field in each format."""

    csl: str
    bibtex: str | None = None
    biblatex: str | None = None
    ris: str | None = None
    endnote: str | None = None
    transform: Transform | None = None

    def native(self, fmt: BibFormat) -> str | None:
        """Native name in the given format."""
        if fmt == BibFormat.CSL_JSON:
            return self.csl
        return getattr(self, fmt.value)


def _mapping(csl: str, **names) -> FieldMapping:
    return FieldMapping(csl=csl, **names)


FIELD_MAPPINGS: dict[str, FieldMapping] = {
    m.csl: m
    for m in [
        # Creators
        _mapping(
            "author",
            bibtex="author",
            biblatex="author",
            ris="AU",
            endnote="authors",
            transform=Transform.NAME,
        ),
        _mapping(
            "editor",
            bibtex="editor",
            biblatex="editor",
            ris="ED",
            endnote="secondary-authors",
            transform=Transform.NAME,
        ),
        _mapping(
            "translator",
            bibtex="translator",
            biblatex="translator",
            ris="A3",
            endnote="translated-authors",
            transform=Transform.NAME,
        ),
        # Titles
        _mapping(
            "title", bibtex="title", biblatex="title", ris="TI", endnote="title"
        ),
        _mapping(
            "container-title",
            bibtex="journal",
            biblatex="journaltitle",
            ris="JO",
            endnote="secondary-title",
        ),
        _mapping(
            "collection-title",
            bibtex="series",
            biblatex="series",
            ris="T3",
            endnote="tertiary-title",
        ),
        _mapping(
            "title-short",
            bibtex="shorttitle",
            biblatex="shorttitle",
            ris="ST",
            endnote="short-title",
        ),
        # Dates
        _mapping(
            "issued",
            bibtex="year",
            biblatex="date",
            ris="PY",
            endnote="year",
            transform=Transform.DATE,
        ),
        _mapping(
            "accessed",
            bibtex="urldate",
            biblatex="urldate",
            ris="Y2",
            endnote="access-date",
            transform=Transform.DATE,
        ),
        # Identifiers
        _mapping(
            "DOI",
            bibtex="doi",
            biblatex="doi",
            ris="DO",
            endnote="electronic-resource-num",
        ),
        _mapping("ISBN", bibtex="isbn", biblatex="isbn", ris="SN", endnote="isbn"),
        _mapping("ISSN", bibtex="issn", biblatex="issn", ris="SN"),
        _mapping("URL", bibtex="url", biblatex="url", ris="UR", endnote="url"),
        _mapping(
            "PMID", bibtex="pmid", biblatex="pmid", ris="AN", endnote="accession-num"
        ),
        # Publication details
        _mapping(
            "publisher",
            bibtex="publisher",
            biblatex="publisher",
            ris="PB",
            endnote="publisher",
        ),
        _mapping(
            "publisher-place",
            bibtex="address",
            biblatex="location",
            ris="CY",
            endnote="pub-location",
        ),
        _mapping(
            "volume",
            bibtex="volume",
            biblatex="volume",
            ris="VL",
            endnote="volume",
            transform=Transform.NUMBER,
        ),
        _mapping(
            "issue",
            bibtex="number",
            biblatex="number",
            ris="IS",
            endnote="number",
            transform=Transform.NUMBER,
        ),
        _mapping(
            "page",
            bibtex="pages",
            biblatex="pages",
            ris="SP",
            endnote="pages",
            transform=Transform.PAGE_RANGE,
        ),
        _mapping(
            "number-of-pages",
            bibtex="pagetotal",
            biblatex="pagetotal",
            transform=Transform.NUMBER,
        ),
        _mapping(
            "edition", bibtex="edition", biblatex="edition", ris="ET", endnote="edition"
        ),
        _mapping(
            "chapter-number",
            bibtex="chapter",
            biblatex="chapter",
            ris="CP",
            endnote="section",
        ),
        # Academic
        _mapping(
            "abstract",
            bibtex="abstract",
            biblatex="abstract",
            ris="AB",
            endnote="abstract",
        ),
        _mapping(
            "keyword",
            bibtex="keywords",
            biblatex="keywords",
            ris="KW",
            endnote="keywords",
        ),
        _mapping("note", bibtex="note", biblatex="note", ris="N1", endnote="notes"),
        _mapping(
            "annote",
            bibtex="annote",
            biblatex="annotation",
            ris="RN",
            endnote="research-notes",
        ),
        # Events
        _mapping(
            "event",
            bibtex="eventtitle",
            biblatex="eventtitle",
            ris="T2",
            endnote="conference-name",
        ),
        _mapping(
            "event-place",
            bibtex="venue",
            biblatex="venue",
            ris="C1",
            endnote="conference-location",
        ),
        # Media
        _mapping(
            "medium",
            bibtex="howpublished",
            biblatex="howpublished",
            ris="M1",
        ),
        _mapping(
            "genre", bibtex="type", biblatex="type", ris="M3", endnote="work-type"
        ),
        # Other
        _mapping(
            "language",
            bibtex="language",
            biblatex="language",
            ris="LA",
            endnote="language",
        ),
        _mapping(
            "call-number",
            bibtex="callnumber",
            biblatex="library",
            ris="CN",
            endnote="call-num",
        ),
    ]
}

# BibTeX container-title depends on the entry type
BIBTEX_TYPE_SPECIFIC_FIELDS: dict[str, dict[str, str]] = {
    "inproceedings": {"container-title": "booktitle"},
    "incollection": {"container-title": "booktitle"},
    "inbook": {"container-title": "booktitle"},
    "inreference": {"container-title": "booktitle"},
    "article": {"container-title": "journal"},
}

# Native BibTeX/BibLaTeX names that resolve to a canonical field
# although no mapping row lists them.
BIBTEX_ALIASES = {
    "booktitle": "container-title",
    "journal": "container-title",
    "journaltitle": "container-title",
    "year": "issued",
    "month": "issued",
    "day": "issued",
    "date": "issued",
    "address": "publisher-place",
    "location": "publisher-place",
    "annotation": "annote",
    "eventtitle": "event",
}

# Tags other RIS writers use for the same canonical fields
RIS_ALIASES = {
    "T1": "title",
    "CT": "title",
    "JF": "container-title",
    "JA": "container-title",
    "J2": "container-title",
    "BT": "container-title",
    "A1": "author",
    "A2": "editor",
    "Y1": "issued",
    "N2": "abstract",
    "EP": "page",
}

# EndNote elements that are read as part of another field
ENDNOTE_ALIASES = {
    "full-title": "container-title",
    "alt-title": "title-short",
    "pub-dates": "issued",
    "tertiary-authors": "translator",
}


def bibtex_field_for(
    csl_field: str,
    entry_type: str | None = None,
    dialect: BibFormat = BibFormat.BIBTEX,
) -> str | None:
    """Native BibTeX/BibLaTeX field for a canonical field.

    Args:
        csl_field: Canonical field name.
        entry_type: Native entry type, consulted for type-specific names.
        dialect: BibTeX or BibLaTeX.

    Returns:
        The native field name, or None when the field has no slot.
    """
    if entry_type and csl_field in BIBTEX_TYPE_SPECIFIC_FIELDS.get(entry_type, {}):
        return BIBTEX_TYPE_SPECIFIC_FIELDS[entry_type][csl_field]

    mapping = FIELD_MAPPINGS.get(csl_field)
    if mapping is None:
        return None
    if dialect == BibFormat.BIBLATEX:
        return mapping.biblatex
    return mapping.bibtex


def csl_field_from_bibtex(native_field: str) -> str | None:
    """Canonical field for a native BibTeX or BibLaTeX field name."""
    normalized = native_field.lower().strip()

    if normalized in BIBTEX_ALIASES:
        return BIBTEX_ALIASES[normalized]

    for csl_field, mapping in FIELD_MAPPINGS.items():
        if mapping.bibtex == normalized or mapping.biblatex == normalized:
            return csl_field

    return None


def ris_tag_for(csl_field: str) -> str | None:
    """RIS tag for a canonical field."""
    mapping = FIELD_MAPPINGS.get(csl_field)
    return mapping.ris if mapping else None


def csl_field_from_ris(tag: str) -> str | None:
    """Canonical field for a RIS tag.

    ``SN`` resolves to ``ISBN``; the first table row listing a tag wins.
    """
    normalized = tag.upper().strip()

    if normalized in RIS_ALIASES:
        return RIS_ALIASES[normalized]

    for csl_field, mapping in FIELD_MAPPINGS.items():
        if mapping.ris == normalized:
            return csl_field

    return None


def endnote_element_for(csl_field: str) -> str | None:
    """EndNote XML element for a canonical field."""
    mapping = FIELD_MAPPINGS.get(csl_field)
    return mapping.endnote if mapping else None


def csl_field_from_endnote(element: str) -> str | None:
    """Canonical field for an EndNote XML element name."""
    normalized = element.lower().strip()

    if normalized in ENDNOTE_ALIASES:
        return ENDNOTE_ALIASES[normalized]

    for csl_field, mapping in FIELD_MAPPINGS.items():
        if mapping.endnote == normalized:
            return csl_field

    return None
