"""Tests for the RIS parser."""

from bibconv.core.entry_types import CslType
from bibconv.core.fields import BibFormat
from bibconv.core.models import Name, Severity, WarningType
from bibconv.parsers.ris import RisParser, split_records


class TestRisParsing:
    """Test parsing of RIS records."""

    def test_id_from_author_and_year(self) -> None:
        """Ids are the first author's family name plus the year."""
        result = RisParser().parse("TY - JOUR\nAU - Smith, John\nPY - 2024\nER -")

        assert len(result.entries) == 1
        assert result.entries[0].id == "smith2024"
        assert result.entries[0].author == (Name(family="Smith", given="John"),)

    def test_page_range_joined(self) -> None:
        result = RisParser().parse("TY  - JOUR\nSP  - 100\nEP  - 110\nER  - ")
        assert result.entries[0].page == "100-110"

    def test_start_page_only(self) -> None:
        result = RisParser().parse("TY  - JOUR\nSP  - e1234\nER  - ")
        assert result.entries[0].page == "e1234"

    def test_sample_document(self, sample_ris) -> None:
        result = RisParser().parse(sample_ris)

        article, book = result.entries
        assert article.type == CslType.ARTICLE_JOURNAL
        assert article.container_title == "Nature"
        assert article.issued.date_parts == [[2024, 3, 15]]
        assert article.keyword == "genomics; rna"
        assert len(article.author) == 2
        assert book.id == "knuth1984"
        assert book.publisher == "Addison-Wesley"
        assert book.isbn == "0-201-13447-0"
        assert result.stats.successful == 2

    def test_serial_number_of_journal_is_issn(self) -> None:
        result = RisParser().parse("TY  - JOUR\nSN  - 1476-4687\nER  - ")
        assert result.entries[0].issn == "1476-4687"
        assert result.entries[0].isbn is None

    def test_ids_without_authors_or_years(self) -> None:
        result = RisParser().parse(
            "TY  - GEN\nTI  - Untitled\nER  - \n"
            "TY  - GEN\nAU  - Doe, Jane\nER  - \n"
        )
        assert [e.id for e in result.entries] == ["entry1", "doe"]

    def test_repeated_ids_get_suffixes(self) -> None:
        record = "TY  - JOUR\nAU  - Smith, J.\nPY  - 2024\nER  - \n"
        result = RisParser().parse(record * 3)
        assert [e.id for e in result.entries] == [
            "smith2024",
            "smith2024b",
            "smith2024c",
        ]

    def test_alias_tags(self) -> None:
        result = RisParser().parse(
            "TY  - CHAP\nT1  - Chapter\nA2  - Editor, E.\nBT  - The Book\n"
            "Y1  - 2001///\nER  - "
        )
        entry = result.entries[0]
        assert entry.type == CslType.CHAPTER
        assert entry.title == "Chapter"
        assert entry.editor == (Name(family="Editor", given="E."),)
        assert entry.container_title == "The Book"
        assert entry.year == 2001

    def test_unknown_tags_kept_as_custom(self) -> None:
        result = RisParser().parse(
            "TY  - JOUR\nZZ  - first\nZZ  - second\nTI  - A\nTI  - B\nER  - "
        )
        entry = result.entries[0]
        assert entry.title == "A"
        assert entry.custom_fields == {"ZZ": ["first", "second"], "TI": ["B"]}
        assert entry.format_metadata.source == BibFormat.RIS
        assert entry.format_metadata.original_type == "JOUR"

    def test_name_suffix(self) -> None:
        result = RisParser().parse("TY  - JOUR\nAU  - King, Martin, Jr.\nER  - ")
        assert result.entries[0].author[0].suffix == "Jr."

    def test_accessed_date(self) -> None:
        result = RisParser().parse("TY  - ELEC\nY2  - 2024/01/31\nER  - ")
        entry = result.entries[0]
        assert entry.type == CslType.WEBPAGE
        assert entry.accessed.date_parts == [[2024, 1, 31]]

    def test_unknown_type_downgraded(self) -> None:
        result = RisParser().parse("TY  - XYZ\nTI  - Odd\nER  - ")

        assert result.entries[0].type == CslType.ARTICLE
        assert result.warnings[0].type == WarningType.TYPE_DOWNGRADE

    def test_byte_order_mark(self) -> None:
        result = RisParser().parse("\ufeffTY  - BOOK\nTI  - X\nER  - ")
        assert result.entries[0].type == CslType.BOOK

    def test_empty_input(self) -> None:
        result = RisParser().parse("")
        assert result.entries == []
        assert result.stats.total == 0


class TestRecordSplitting:
    """Test grouping of tag lines."""

    def test_ty_without_er_closes_previous(self) -> None:
        """Parsing is lenient about a missing ER."""
        records = split_records("TY  - JOUR\nTI  - A\nTY  - BOOK\nTI  - B\nER  - ")
        assert [r.type for r in records] == ["JOUR", "BOOK"]

    def test_unclosed_last_record_kept(self) -> None:
        records = split_records("TY  - JOUR\nTI  - A\n")
        assert len(records) == 1

    def test_lines_outside_records_skipped(self) -> None:
        records = split_records("TI  - stray\nnot a tag\nTY  - JOUR\nER  - ")
        assert len(records) == 1
        assert records[0].fields == {}


class TestRisValidation:
    """Test RIS validation."""

    def test_valid(self, sample_ris) -> None:
        assert RisParser().validate(sample_ris) == []

    def test_ty_without_er_warns(self) -> None:
        """Validation is strict where parsing is lenient."""
        warnings = RisParser().validate("TY  - JOUR\nTY  - BOOK\nER  - ")
        assert len(warnings) == 1
        assert "TY tag without ER tag" in warnings[0].message
        assert warnings[0].type == WarningType.VALIDATION_ERROR

    def test_er_without_ty(self) -> None:
        warnings = RisParser().validate("TY  - JOUR\nER  - \nER  - ")
        assert [w.message for w in warnings] == [
            "Line 3: ER tag without matching TY tag"
        ]

    def test_unclosed_entry(self) -> None:
        warnings = RisParser().validate("TY  - JOUR\nTI  - A")
        assert warnings[0].message == "Unclosed entry (missing ER tag)"

    def test_invalid_line(self) -> None:
        warnings = RisParser().validate("TY  - JOUR\nrandom text\nER  - ")
        assert warnings[0].message == "Line 2: Invalid RIS format"

    def test_empty_input(self) -> None:
        warnings = RisParser().validate("")
        assert [w.message for w in warnings] == ["No entries found"]
        assert all(w.severity == Severity.WARNING for w in warnings)
