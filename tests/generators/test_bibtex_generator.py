"""Tests for BibTeX and BibLaTeX generation."""

from bibconv.core.entry_types import CslType
from bibconv.core.models import Entry, PartialDate
from bibconv.generators import GeneratorOptions
from bibconv.generators.biblatex import BiblatexGenerator
from bibconv.generators.bibtex import BibtexGenerator
from bibconv.parsers.biblatex import BiblatexParser
from bibconv.parsers.bibtex import BibtexParser


class TestBibtexGenerator:
    """Test BibTeX output."""

    def test_article(self, article_entry) -> None:
        output = BibtexGenerator().generate([article_entry])

        assert output == (
            "@article{smith2024,\n"
            "  author = {Smith, John and Doe, Jane},\n"
            '  title = {M\\"{u}ller \\& Sons: A Study},\n'
            "  journal = {Nature},\n"
            "  year = {2024},\n"
            "  month = mar,\n"
            "  day = {15},\n"
            "  volume = {42},\n"
            "  pages = {100--110},\n"
            "  doi = {10.1000/a_b},\n"
            "  url = {https://x.org/?q=1\\%20},\n"
            "  keywords = {genomics; rna}\n"
            "}\n"
        )

    def test_lossy_type_becomes_misc(self, dataset_entry) -> None:
        output = BibtexGenerator().generate([dataset_entry])

        assert output.startswith("@misc{noaa2023,")
        assert "author = {{NOAA}}" in output

    def test_original_type_reused(self) -> None:
        """A source type that maps to the same canonical type is kept."""
        entries = BibtexParser().parse("@booklet{b, title = {Pamphlet}}").entries
        assert BibtexGenerator().generate(entries).startswith("@booklet{b,")

    def test_booktitle_for_conference_papers(self) -> None:
        entry = Entry(
            id="p", type=CslType.PAPER_CONFERENCE, container_title="Proc. X"
        )
        output = BibtexGenerator().generate([entry])

        assert output.startswith("@inproceedings{p,")
        assert "booktitle = {Proc. X}" in output

    def test_custom_fields_reemitted(self) -> None:
        entries = BibtexParser().parse(r"@article{k, x-note = {Caf\'e}}").entries
        output = BibtexGenerator().generate(entries)

        assert r"x-note = {Caf\'e}" in output

    def test_custom_fields_can_be_dropped(self) -> None:
        entries = BibtexParser().parse("@article{k, x-note = {kept?}}").entries
        options = GeneratorOptions(include_custom_fields=False)

        assert "x-note" not in BibtexGenerator().generate(entries, options)

    def test_extra_fields_without_slot_are_dropped(self) -> None:
        entry = Entry(id="x", type=CslType.BOOK, extra={"dimensions": "24 cm"})
        assert BibtexGenerator().generate([entry]) == "@book{x\n}\n"

    def test_unbalanced_braces_do_not_swallow_entries(self) -> None:
        entries = [
            Entry(id="a", type=CslType.BOOK, title="Set {a, b"),
            Entry(id="b", type=CslType.BOOK, title="Second"),
        ]
        output = BibtexGenerator().generate(entries)
        result = BibtexParser().parse(output)

        assert r"title = {Set \{a, b}" in output
        assert [e.id for e in result.entries] == ["a", "b"]
        assert result.entries[0].title == "Set {a, b"
        assert not result.has_errors

    def test_raw_year(self) -> None:
        entry = Entry(id="x", type=CslType.BOOK, issued=PartialDate(raw="in press"))
        assert "year = {in press}" in BibtexGenerator().generate([entry])

    def test_options(self, article_entry, dataset_entry) -> None:
        options = GeneratorOptions(indent="\t", sort=True, line_ending="\r\n")
        output = BibtexGenerator().generate([article_entry, dataset_entry], options)

        assert output.index("@misc{noaa2023") < output.index("@article{smith2024")
        assert "\r\n\ttitle = " in output
        assert output.endswith("}\r\n")
        assert "}\r\n\r\n@article" in output

    def test_empty(self) -> None:
        assert BibtexGenerator().generate([]) == ""

    def test_entries_not_mutated(self, article_entry) -> None:
        before = article_entry.to_csl()
        BibtexGenerator().generate([article_entry])
        assert article_entry.to_csl() == before

    def test_round_trip(self, sample_bibtex) -> None:
        """Generated text parses back into the same entries."""
        first = BibtexParser().parse(sample_bibtex).entries
        second = BibtexParser().parse(BibtexGenerator().generate(first)).entries

        assert [e.to_csl() for e in second] == [e.to_csl() for e in first]


class TestBiblatexGenerator:
    """Test BibLaTeX output."""

    def test_native_modern_type(self, dataset_entry) -> None:
        output = BiblatexGenerator().generate([dataset_entry])

        assert output.startswith("@dataset{noaa2023,")
        assert "date = {2023}" in output
        assert "year =" not in output

    def test_iso_date(self, article_entry) -> None:
        output = BiblatexGenerator().generate([article_entry])
        assert "date = {2024-03-15}" in output
        assert "month" not in output

    def test_location(self) -> None:
        entry = Entry(id="b", type=CslType.BOOK, publisher_place="Berlin")
        assert "location = {Berlin}" in BiblatexGenerator().generate([entry])

    def test_round_trip(self) -> None:
        text = (
            "@online{site,\n  title = {Docs},\n  url = {https://x.org},\n"
            "  date = {2023-06},\n  urldate = {2024-01-02}\n}\n"
        )
        first = BiblatexParser().parse(text).entries
        output = BiblatexGenerator().generate(first)

        assert output.startswith("@online{site,")
        second = BiblatexParser().parse(output).entries
        assert [e.to_csl() for e in second] == [e.to_csl() for e in first]
