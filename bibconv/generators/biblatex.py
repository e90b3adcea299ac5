"""BibLaTeX generator.

Shares the BibTeX writer and differs in the type vocabulary, the native
field names and the dates, which are written as ISO 8601 ``date`` fields.
"""

from bibconv.core.dates import serialize_date
from bibconv.core.fields import BibFormat
from bibconv.core.latex import escape_stray_braces
from bibconv.core.models import PartialDate

from .bibtex import BibtexGenerator


class BiblatexGenerator(BibtexGenerator):
    """Generator for BibLaTeX text."""

    format = BibFormat.BIBLATEX

    def encode_date(
        self, csl_field: str, native: str, date: PartialDate
    ) -> list[tuple[str, str]]:
        text = escape_stray_braces(serialize_date(date))
        return [(native, f"{{{text}}}")] if text else []
