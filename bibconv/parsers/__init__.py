"""Format parsers.

Every parser turns the text of one format into intermediate entries and
reports problems as warnings instead of raising:

- **BibTeX**: Character scanner with macros, concatenation and recovery
- **BibLaTeX**: BibTeX scanner with BibLaTeX provenance
- **RIS**: Line-oriented tag records
- **CSL-JSON**: Validated pass-through of the intermediate form
- **EndNote XML**: ElementTree walk over ``<record>`` elements

A fresh parser is built for every call so no macro state leaks between
documents.
"""

from bibconv.core.errors import UnsupportedFormatError
from bibconv.core.fields import BibFormat

from .base import Parser
from .biblatex import BiblatexParser
from .bibtex import BibtexParser
from .csl import CslJsonParser
from .endnote import EndnoteXmlParser
from .ris import RisParser

PARSERS: dict[BibFormat, type] = {
    BibFormat.BIBTEX: BibtexParser,
    BibFormat.BIBLATEX: BiblatexParser,
    BibFormat.RIS: RisParser,
    BibFormat.CSL_JSON: CslJsonParser,
    BibFormat.ENDNOTE: EndnoteXmlParser,
}


def get_parser(fmt: BibFormat | str) -> Parser:
    """Create a parser for a format.

    Raises:
        UnsupportedFormatError: If no parser handles the format.
    """
    try:
        return PARSERS[BibFormat.coerce(fmt)]()
    except (KeyError, ValueError):
        raise UnsupportedFormatError(str(fmt)) from None


__all__ = [
    "Parser",
    "PARSERS",
    "get_parser",
    "BibtexParser",
    "BiblatexParser",
    "RisParser",
    "CslJsonParser",
    "EndnoteXmlParser",
]
