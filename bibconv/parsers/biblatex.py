"""BibLaTeX parser.

The syntax is BibTeX's and the BibTeX tables already know the BibLaTeX
vocabulary, so this parser only changes the recorded provenance.
"""

import msgspec

from bibconv.core.fields import BibFormat
from bibconv.core.models import ConversionResult, ConversionWarning, Entry

from .bibtex import BibtexParser


def _as_biblatex(entry: Entry) -> Entry:
    if entry.format_metadata is None:
        return entry
    metadata = msgspec.structs.replace(
        entry.format_metadata, source=BibFormat.BIBLATEX
    )
    return msgspec.structs.replace(entry, format_metadata=metadata)


class BiblatexParser:
    """Parser for BibLaTeX text."""

    format = BibFormat.BIBLATEX

    def parse(self, content: str) -> ConversionResult:
        result = BibtexParser().parse(content)
        return ConversionResult(
            entries=[_as_biblatex(entry) for entry in result.entries],
            warnings=result.warnings,
            stats=result.stats,
        )

    def validate(self, content: str) -> list[ConversionWarning]:
        return BibtexParser().validate(content)
