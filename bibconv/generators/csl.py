"""CSL-JSON generator."""

import json

from bibconv.core.fields import BibFormat
from bibconv.core.models import Entry

from .base import DEFAULT_OPTIONS, GeneratorOptions, ordered


class CslJsonGenerator:
    """Generator for CSL-JSON arrays.

    Provenance metadata is dropped and ``extra`` fields are merged back
    into each item.
    """

    format = BibFormat.CSL_JSON

    def generate(
        self, entries: list[Entry], options: GeneratorOptions | None = None
    ) -> str:
        options = options or DEFAULT_OPTIONS
        items = [entry.to_csl() for entry in ordered(entries, options)]
        text = json.dumps(items, indent=options.indent, ensure_ascii=False)
        # Raw newlines in JSON output are always structural
        return text.replace("\n", options.line_ending)
