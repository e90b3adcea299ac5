"""Entry type mappings between bibliography formats.

CSL item types are the hub vocabulary. Every format maps its native types
onto :class:`CslType` on the way in and back out again on the way out.

BibTeX has the smallest vocabulary: modern types such as datasets or
software have no slot and degrade to ``@misc``. BibLaTeX, RIS and EndNote
have native types for them.
"""

from enum import Enum, unique

import msgspec

from .fields import BIBTEX_FAMILY, BibFormat


@unique
class CslType(str, Enum):
    """Canonical item types (CSL 1.0.2)."""

    ARTICLE = "article"
    ARTICLE_JOURNAL = "article-journal"
    ARTICLE_MAGAZINE = "article-magazine"
    ARTICLE_NEWSPAPER = "article-newspaper"
    BILL = "bill"
    BOOK = "book"
    BROADCAST = "broadcast"
    CHAPTER = "chapter"
    DATASET = "dataset"
    ENTRY = "entry"
    ENTRY_DICTIONARY = "entry-dictionary"
    ENTRY_ENCYCLOPEDIA = "entry-encyclopedia"
    FIGURE = "figure"
    GRAPHIC = "graphic"
    INTERVIEW = "interview"
    LEGAL_CASE = "legal_case"
    LEGISLATION = "legislation"
    MANUSCRIPT = "manuscript"
    MAP = "map"
    MOTION_PICTURE = "motion_picture"
    MUSICAL_SCORE = "musical_score"
    PAPER_CONFERENCE = "paper-conference"
    PATENT = "patent"
    PERSONAL_COMMUNICATION = "personal_communication"
    POST = "post"
    POST_WEBLOG = "post-weblog"
    REPORT = "report"
    REVIEW = "review"
    REVIEW_BOOK = "review-book"
    SONG = "song"
    SPEECH = "speech"
    THESIS = "thesis"
    TREATY = "treaty"
    WEBPAGE = "webpage"
    SOFTWARE = "software"


CSL_TYPE_VALUES = frozenset(t.value for t in CslType)

# Ingest fallback for types a table does not know
DEFAULT_TYPE = CslType.ARTICLE

# Egress fallback for canonical types a table does not know
GENERIC_TYPES = {
    BibFormat.BIBTEX: "misc",
    BibFormat.BIBLATEX: "misc",
    BibFormat.RIS: "GEN",
    BibFormat.ENDNOTE: "Generic",
    BibFormat.CSL_JSON: DEFAULT_TYPE.value,
}


class EntryTypeMapping(msgspec.Struct, frozen=True, kw_only=True):
    """Native types of one canonical type in each format."""

    csl: CslType
    bibtex: str
    biblatex: str
    ris: str
    endnote: str
    lossy_to_bibtex: bool = False


class TypeMapping(msgspec.Struct, frozen=True):
    """Result of mapping a canonical type to a native one."""

    type: str
    lossy: bool


def _row(csl, bibtex, biblatex, ris, endnote, lossy=False) -> EntryTypeMapping:
    return EntryTypeMapping(
        csl=csl,
        bibtex=bibtex,
        biblatex=biblatex,
        ris=ris,
        endnote=endnote,
        lossy_to_bibtex=lossy,
    )


ENTRY_TYPE_MAPPINGS: dict[CslType, EntryTypeMapping] = {
    row.csl: row
    for row in [
        # Core academic types
        _row(CslType.ARTICLE_JOURNAL, "article", "article", "JOUR", "Journal Article"),
        _row(CslType.ARTICLE, "article", "article", "JOUR", "Journal Article"),
        _row(CslType.BOOK, "book", "book", "BOOK", "Book"),
        _row(CslType.CHAPTER, "incollection", "incollection", "CHAP", "Book Section"),
        _row(
            CslType.PAPER_CONFERENCE,
            "inproceedings",
            "inproceedings",
            "CONF",
            "Conference Paper",
        ),
        _row(CslType.THESIS, "phdthesis", "thesis", "THES", "Thesis"),
        _row(CslType.REPORT, "techreport", "report", "RPRT", "Report"),
        # Periodicals
        _row(
            CslType.ARTICLE_MAGAZINE, "article", "article", "MGZN", "Magazine Article"
        ),
        _row(
            CslType.ARTICLE_NEWSPAPER,
            "article",
            "article",
            "NEWS",
            "Newspaper Article",
        ),
        # Modern types, no BibTeX slot
        _row(CslType.DATASET, "misc", "dataset", "DATA", "Dataset", lossy=True),
        _row(
            CslType.SOFTWARE,
            "misc",
            "software",
            "COMP",
            "Computer Program",
            lossy=True,
        ),
        _row(CslType.WEBPAGE, "misc", "online", "ELEC", "Web Page", lossy=True),
        _row(CslType.PATENT, "misc", "patent", "PAT", "Patent", lossy=True),
        # Reference works
        _row(
            CslType.ENTRY_ENCYCLOPEDIA,
            "incollection",
            "inreference",
            "ENCYC",
            "Encyclopedia",
        ),
        _row(
            CslType.ENTRY_DICTIONARY,
            "incollection",
            "inreference",
            "DICT",
            "Dictionary",
        ),
        _row(CslType.ENTRY, "misc", "inreference", "GEN", "Generic", lossy=True),
        # Legal
        _row(
            CslType.LEGAL_CASE,
            "misc",
            "jurisdiction",
            "CASE",
            "Case",
            lossy=True,
        ),
        _row(
            CslType.LEGISLATION,
            "misc",
            "legislation",
            "STAT",
            "Statute",
            lossy=True,
        ),
        _row(CslType.BILL, "misc", "legislation", "BILL", "Bill", lossy=True),
        _row(CslType.TREATY, "misc", "legal", "GEN", "Generic", lossy=True),
        # Media
        _row(
            CslType.MOTION_PICTURE,
            "misc",
            "movie",
            "MPCT",
            "Film or Broadcast",
            lossy=True,
        ),
        _row(
            CslType.BROADCAST,
            "misc",
            "audio",
            "MPCT",
            "Film or Broadcast",
            lossy=True,
        ),
        _row(CslType.SONG, "misc", "music", "SOUND", "Music", lossy=True),
        _row(CslType.MUSICAL_SCORE, "misc", "music", "MUSIC", "Music", lossy=True),
        _row(CslType.GRAPHIC, "misc", "artwork", "ART", "Artwork", lossy=True),
        _row(CslType.FIGURE, "misc", "image", "FIGURE", "Figure", lossy=True),
        _row(CslType.MAP, "misc", "misc", "MAP", "Map", lossy=True),
        # Other academic
        _row(CslType.MANUSCRIPT, "unpublished", "unpublished", "UNPB", "Manuscript"),
        _row(CslType.REVIEW_BOOK, "article", "review", "JOUR", "Journal Article"),
        _row(CslType.REVIEW, "article", "review", "JOUR", "Journal Article"),
        _row(CslType.SPEECH, "misc", "misc", "HEAR", "Hearing", lossy=True),
        _row(CslType.INTERVIEW, "misc", "misc", "INPR", "Interview", lossy=True),
        _row(
            CslType.PERSONAL_COMMUNICATION,
            "misc",
            "letter",
            "PCOMM",
            "Personal Communication",
            lossy=True,
        ),
        # Web
        _row(CslType.POST, "misc", "online", "BLOG", "Blog", lossy=True),
        _row(CslType.POST_WEBLOG, "misc", "online", "BLOG", "Blog", lossy=True),
    ]
}

BIBTEX_TO_CSL: dict[str, CslType] = {
    "article": CslType.ARTICLE_JOURNAL,
    "book": CslType.BOOK,
    "booklet": CslType.BOOK,
    "inbook": CslType.CHAPTER,
    "incollection": CslType.CHAPTER,
    "inproceedings": CslType.PAPER_CONFERENCE,
    "conference": CslType.PAPER_CONFERENCE,
    "manual": CslType.BOOK,
    "mastersthesis": CslType.THESIS,
    "phdthesis": CslType.THESIS,
    "proceedings": CslType.BOOK,
    "techreport": CslType.REPORT,
    "unpublished": CslType.MANUSCRIPT,
    "misc": CslType.ARTICLE,
}

BIBLATEX_TO_CSL: dict[str, CslType] = {
    **BIBTEX_TO_CSL,
    "mvbook": CslType.BOOK,
    "bookinbook": CslType.CHAPTER,
    "suppbook": CslType.CHAPTER,
    "collection": CslType.BOOK,
    "mvcollection": CslType.BOOK,
    "suppcollection": CslType.CHAPTER,
    "mvproceedings": CslType.BOOK,
    "reference": CslType.BOOK,
    "mvreference": CslType.BOOK,
    "inreference": CslType.ENTRY_ENCYCLOPEDIA,
    "periodical": CslType.BOOK,
    "suppperiodical": CslType.ARTICLE_JOURNAL,
    "thesis": CslType.THESIS,
    "report": CslType.REPORT,
    "dataset": CslType.DATASET,
    "software": CslType.SOFTWARE,
    "online": CslType.WEBPAGE,
    "electronic": CslType.WEBPAGE,
    "www": CslType.WEBPAGE,
    "patent": CslType.PATENT,
    "jurisdiction": CslType.LEGAL_CASE,
    "legislation": CslType.LEGISLATION,
    "legal": CslType.TREATY,
    "movie": CslType.MOTION_PICTURE,
    "video": CslType.MOTION_PICTURE,
    "audio": CslType.BROADCAST,
    "music": CslType.SONG,
    "artwork": CslType.GRAPHIC,
    "image": CslType.FIGURE,
    "letter": CslType.PERSONAL_COMMUNICATION,
    "review": CslType.REVIEW,
}

RIS_TO_CSL: dict[str, CslType] = {
    "JOUR": CslType.ARTICLE_JOURNAL,
    "JFULL": CslType.ARTICLE_JOURNAL,
    "EJOUR": CslType.ARTICLE_JOURNAL,
    "BOOK": CslType.BOOK,
    "EBOOK": CslType.BOOK,
    "EDBOOK": CslType.BOOK,
    "CHAP": CslType.CHAPTER,
    "ECHAP": CslType.CHAPTER,
    "CONF": CslType.PAPER_CONFERENCE,
    "CPAPER": CslType.PAPER_CONFERENCE,
    "THES": CslType.THESIS,
    "RPRT": CslType.REPORT,
    "MGZN": CslType.ARTICLE_MAGAZINE,
    "NEWS": CslType.ARTICLE_NEWSPAPER,
    "DATA": CslType.DATASET,
    "COMP": CslType.SOFTWARE,
    "ELEC": CslType.WEBPAGE,
    "PAT": CslType.PATENT,
    "ENCYC": CslType.ENTRY_ENCYCLOPEDIA,
    "DICT": CslType.ENTRY_DICTIONARY,
    "CASE": CslType.LEGAL_CASE,
    "STAT": CslType.LEGISLATION,
    "BILL": CslType.BILL,
    "MPCT": CslType.MOTION_PICTURE,
    "VIDEO": CslType.MOTION_PICTURE,
    "SOUND": CslType.SONG,
    "MUSIC": CslType.MUSICAL_SCORE,
    "ART": CslType.GRAPHIC,
    "FIGURE": CslType.FIGURE,
    "MAP": CslType.MAP,
    "UNPB": CslType.MANUSCRIPT,
    "MANSCPT": CslType.MANUSCRIPT,
    "HEAR": CslType.SPEECH,
    "INPR": CslType.INTERVIEW,
    "PCOMM": CslType.PERSONAL_COMMUNICATION,
    "BLOG": CslType.POST_WEBLOG,
    "GEN": CslType.ARTICLE,
}

ENDNOTE_TO_CSL: dict[str, CslType] = {
    "journal article": CslType.ARTICLE_JOURNAL,
    "book": CslType.BOOK,
    "edited book": CslType.BOOK,
    "book section": CslType.CHAPTER,
    "conference paper": CslType.PAPER_CONFERENCE,
    "conference proceedings": CslType.PAPER_CONFERENCE,
    "thesis": CslType.THESIS,
    "report": CslType.REPORT,
    "magazine article": CslType.ARTICLE_MAGAZINE,
    "newspaper article": CslType.ARTICLE_NEWSPAPER,
    "dataset": CslType.DATASET,
    "computer program": CslType.SOFTWARE,
    "web page": CslType.WEBPAGE,
    "patent": CslType.PATENT,
    "encyclopedia": CslType.ENTRY_ENCYCLOPEDIA,
    "dictionary": CslType.ENTRY_DICTIONARY,
    "case": CslType.LEGAL_CASE,
    "legal rule or regulation": CslType.LEGISLATION,
    "statute": CslType.LEGISLATION,
    "bill": CslType.BILL,
    "film or broadcast": CslType.MOTION_PICTURE,
    "music": CslType.SONG,
    "artwork": CslType.GRAPHIC,
    "figure": CslType.FIGURE,
    "map": CslType.MAP,
    "manuscript": CslType.MANUSCRIPT,
    "unpublished work": CslType.MANUSCRIPT,
    "hearing": CslType.SPEECH,
    "interview": CslType.INTERVIEW,
    "personal communication": CslType.PERSONAL_COMMUNICATION,
    "blog": CslType.POST_WEBLOG,
    "generic": CslType.ARTICLE,
}

# EndNote's numeric ref-type codes, used when a record has no name attribute
ENDNOTE_TYPE_CODES: dict[str, int] = {
    "Artwork": 2,
    "Bill": 4,
    "Book Section": 5,
    "Book": 6,
    "Case": 7,
    "Computer Program": 9,
    "Conference Proceedings": 10,
    "Web Page": 12,
    "Generic": 13,
    "Hearing": 14,
    "Journal Article": 17,
    "Magazine Article": 19,
    "Map": 20,
    "Film or Broadcast": 21,
    "Newspaper Article": 23,
    "Patent": 25,
    "Personal Communication": 26,
    "Report": 27,
    "Edited Book": 28,
    "Statute": 31,
    "Thesis": 32,
    "Unpublished Work": 34,
    "Manuscript": 36,
    "Figure": 37,
    "Conference Paper": 47,
    "Dictionary": 52,
    "Encyclopedia": 53,
    "Blog": 56,
    "Dataset": 59,
    "Music": 61,
}

_INGEST_TABLES = {
    BibFormat.BIBTEX: BIBTEX_TO_CSL,
    BibFormat.BIBLATEX: BIBLATEX_TO_CSL,
    BibFormat.RIS: RIS_TO_CSL,
    BibFormat.ENDNOTE: ENDNOTE_TO_CSL,
}


def is_csl_type(value: str) -> bool:
    """Check whether a string is a canonical type name."""
    return value in CSL_TYPE_VALUES


def coerce_csl_type(value: object) -> CslType | None:
    """Resolve a loosely spelled canonical type name.

    The exact spelling is tried first so that types containing underscores
    (``legal_case``) survive; hyphen/underscore variants are tried next.
    """
    if isinstance(value, CslType):
        return value
    if not isinstance(value, str):
        return None

    normalized = value.strip().lower()
    for candidate in (
        normalized,
        normalized.replace("_", "-"),
        normalized.replace("-", "_"),
    ):
        if candidate in CSL_TYPE_VALUES:
            return CslType(candidate)
    return None


def normalize_to_csl_type(raw_type: str, fmt: BibFormat | str) -> CslType:
    """Map a native entry type onto the canonical taxonomy.

    Lookup is case-insensitive. The BibTeX table falls back to BibLaTeX
    vocabulary since one parser reads both dialects.

    Args:
        raw_type: Native type as found in the source.
        fmt: Source format.

    Returns:
        The canonical type, or ``article`` for anything unrecognized.
    """
    if not isinstance(raw_type, str):
        return DEFAULT_TYPE

    try:
        fmt = BibFormat.coerce(fmt)
    except ValueError:
        return DEFAULT_TYPE

    if fmt == BibFormat.CSL_JSON:
        return coerce_csl_type(raw_type) or DEFAULT_TYPE

    if fmt == BibFormat.RIS:
        key = raw_type.strip().upper()
    else:
        key = raw_type.strip().lower()

    table = _INGEST_TABLES[fmt]
    if key in table:
        return table[key]
    if fmt == BibFormat.BIBTEX and key in BIBLATEX_TO_CSL:
        return BIBLATEX_TO_CSL[key]
    return DEFAULT_TYPE


def is_known_native_type(raw_type: str, fmt: BibFormat | str) -> bool:
    """Check whether a native type has an explicit table row."""
    fmt = BibFormat.coerce(fmt)
    if fmt == BibFormat.CSL_JSON:
        return coerce_csl_type(raw_type) is not None
    if fmt == BibFormat.RIS:
        return raw_type.strip().upper() in RIS_TO_CSL
    key = raw_type.strip().lower()
    if fmt in BIBTEX_FAMILY:
        return key in BIBLATEX_TO_CSL
    return key in _INGEST_TABLES[fmt]


def denormalize_from_csl_type(
    csl_type: CslType | str, fmt: BibFormat | str
) -> TypeMapping:
    """Map a canonical type to the native type of a target format.

    ``lossy`` depends only on the (type, format) pair: it is set when the
    target has no native slot and a generic type stands in, which happens
    for BibTeX's ``@misc`` substitutes and for any unknown canonical type.

    Args:
        csl_type: Canonical type (member or string value).
        fmt: Target format.

    Returns:
        The native type and the loss flag.
    """
    try:
        fmt = BibFormat.coerce(fmt)
    except ValueError:
        return TypeMapping(type=GENERIC_TYPES[BibFormat.BIBTEX], lossy=True)

    resolved = csl_type if isinstance(csl_type, CslType) else None
    if resolved is None and isinstance(csl_type, str) and is_csl_type(csl_type):
        resolved = CslType(csl_type)

    if resolved is None or resolved not in ENTRY_TYPE_MAPPINGS:
        return TypeMapping(type=GENERIC_TYPES[fmt], lossy=True)

    if fmt == BibFormat.CSL_JSON:
        return TypeMapping(type=resolved.value, lossy=False)

    mapping = ENTRY_TYPE_MAPPINGS[resolved]
    native = getattr(mapping, fmt.value)
    lossy = mapping.lossy_to_bibtex and fmt == BibFormat.BIBTEX
    return TypeMapping(type=native, lossy=lossy)
