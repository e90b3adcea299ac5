"""Tests for CSL-JSON generation."""

import json

from bibconv.core.entry_types import CslType
from bibconv.core.models import Entry
from bibconv.generators import GeneratorOptions
from bibconv.generators.csl import CslJsonGenerator
from bibconv.parsers.bibtex import BibtexParser
from bibconv.parsers.csl import CslJsonParser


class TestCslJsonGenerator:
    """Test CSL-JSON output."""

    def test_article(self, article_entry) -> None:
        items = json.loads(CslJsonGenerator().generate([article_entry]))

        assert items == [
            {
                "id": "smith2024",
                "type": "article-journal",
                "author": [
                    {"family": "Smith", "given": "John"},
                    {"family": "Doe", "given": "Jane"},
                ],
                "title": "Müller & Sons: A Study",
                "container-title": "Nature",
                "issued": {"date-parts": [[2024, 3, 15]]},
                "DOI": "10.1000/a_b",
                "URL": "https://x.org/?q=1%20",
                "volume": "42",
                "page": "100-110",
                "keyword": "genomics; rna",
            }
        ]

    def test_unicode_not_escaped(self, article_entry) -> None:
        assert "Müller" in CslJsonGenerator().generate([article_entry])

    def test_metadata_dropped_and_extra_merged(self) -> None:
        entries = BibtexParser().parse("@misc{k, title = {T}}").entries
        entry = entries[0]
        items = json.loads(CslJsonGenerator().generate(entries))
        assert "_formatMetadata" not in items[0]

        with_extra = Entry(id="e", type=CslType.BOOK, extra={"dimensions": "24 cm"})
        items = json.loads(CslJsonGenerator().generate([with_extra, entry]))
        assert items[0]["dimensions"] == "24 cm"

    def test_indent_option(self, article_entry) -> None:
        output = CslJsonGenerator().generate(
            [article_entry], GeneratorOptions(indent="    ")
        )
        assert '\n    {\n        "id": "smith2024"' in output

    def test_empty(self) -> None:
        assert CslJsonGenerator().generate([]) == "[]"

    def test_round_trip(self, sample_csl) -> None:
        first = CslJsonParser().parse(sample_csl).entries
        second = CslJsonParser().parse(CslJsonGenerator().generate(first)).entries

        assert second == first

    def test_name_and_date_options_survive(self) -> None:
        item = {
            "id": "k",
            "type": "book",
            "author": [
                {"family": "Smith", "given": "J", "parse-names": False},
                {"family": "Mao", "given": "Zedong", "static-ordering": True},
                {"family": "King", "suffix": "Jr.", "comma-suffix": True},
            ],
            "issued": {"literal": "Spring 1999"},
            "accessed": {"date-parts": [[2024, 1]], "circa": True},
        }
        entries = CslJsonParser().parse(json.dumps([item])).entries
        output = json.loads(CslJsonGenerator().generate(entries))

        assert output == [item]
