"""Format generators.

Inverse of the parsers: native types and field names are re-derived from
the mapping tables, names and dates are serialized back to native syntax.

- **BibTeX / BibLaTeX**: Braced, LaTeX-encoded fields in conventional order
- **RIS**: Tag lines closed by ``ER``
- **CSL-JSON**: JSON array without provenance metadata
- **EndNote XML**: ElementTree-built ``<record>`` documents
"""

from bibconv.core.errors import UnsupportedFormatError
from bibconv.core.fields import BibFormat

from .base import Generator, GeneratorOptions
from .biblatex import BiblatexGenerator
from .bibtex import BibtexGenerator
from .csl import CslJsonGenerator
from .endnote import EndnoteXmlGenerator
from .ris import RisGenerator

GENERATORS: dict[BibFormat, type] = {
    BibFormat.BIBTEX: BibtexGenerator,
    BibFormat.BIBLATEX: BiblatexGenerator,
    BibFormat.RIS: RisGenerator,
    BibFormat.CSL_JSON: CslJsonGenerator,
    BibFormat.ENDNOTE: EndnoteXmlGenerator,
}


def get_generator(fmt: BibFormat | str) -> Generator:
    """Create a generator for a format.

    Raises:
        UnsupportedFormatError: If no generator handles the format.
    """
    try:
        return GENERATORS[BibFormat.coerce(fmt)]()
    except (KeyError, ValueError):
        raise UnsupportedFormatError(str(fmt)) from None


__all__ = [
    "Generator",
    "GeneratorOptions",
    "GENERATORS",
    "get_generator",
    "BibtexGenerator",
    "BiblatexGenerator",
    "RisGenerator",
    "CslJsonGenerator",
    "EndnoteXmlGenerator",
]
