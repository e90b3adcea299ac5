"""Tests for date parsing and serialization."""

import pytest

from bibconv.core.dates import (
    parse_bibtex_date,
    parse_date,
    parse_month,
    parse_ris_date,
    serialize_bibtex_date,
    serialize_date,
    serialize_ris_date,
)
from bibconv.core.models import PartialDate


class TestParseMonth:
    """Test month recognition."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("mar", 3),
            ("March", 3),
            ("Sept.", 9),
            ("11", 11),
            (12, 12),
            ("13", None),
            (0, None),
            ("Brumaire", None),
            (None, None),
        ],
    )
    def test_values(self, value, expected) -> None:
        assert parse_month(value) == expected


class TestParseDate:
    """Test free-form and ISO 8601 dates."""

    def test_year_only(self) -> None:
        assert parse_date("2024").date_parts == [[2024]]

    def test_iso_forms(self) -> None:
        assert parse_date("2024-03").date_parts == [[2024, 3]]
        assert parse_date("2024-03-15").date_parts == [[2024, 3, 15]]
        assert parse_date("2024-03-15T10:00:00Z").date_parts == [[2024, 3, 15]]

    def test_slash_form(self) -> None:
        assert parse_date("2024/03/15").date_parts == [[2024, 3, 15]]

    def test_natural_language(self) -> None:
        assert parse_date("March 2024").date_parts == [[2024, 3]]
        assert parse_date("15 March 2024").date_parts == [[2024, 3, 15]]

    def test_range(self) -> None:
        date = parse_date("2024-03-15/2024-03-20")
        assert date.date_parts == [[2024, 3, 15], [2024, 3, 20]]
        assert date.is_range

    def test_circa(self) -> None:
        date = parse_date("1850~")
        assert date.date_parts == [[1850]]
        assert date.circa is True

    def test_unparseable_keeps_raw(self) -> None:
        date = parse_date("forthcoming")
        assert date.date_parts is None
        assert date.raw == "forthcoming"

    def test_year_recovered_from_text(self) -> None:
        date = parse_date("Spring 2019 (approx)")
        assert date.year == 2019
        assert date.raw == "Spring 2019 (approx)"

    def test_blank(self) -> None:
        assert parse_date("") is None
        assert parse_date(None) is None


class TestFormatDates:
    """Test BibTeX and RIS specific forms."""

    def test_bibtex_parts(self) -> None:
        assert parse_bibtex_date("2024", "mar", "5").date_parts == [[2024, 3, 5]]
        assert parse_bibtex_date("2024", "3").date_parts == [[2024, 3]]

    def test_bibtex_day_needs_month(self) -> None:
        assert parse_bibtex_date("2024", None, "5").date_parts == [[2024]]

    def test_bibtex_unknown_month_is_omitted(self) -> None:
        assert parse_bibtex_date("2024", "Brumaire").date_parts == [[2024]]

    def test_bibtex_without_year(self) -> None:
        assert parse_bibtex_date(None, "mar") is None
        assert parse_bibtex_date("in press").raw == "in press"

    def test_ris_date(self) -> None:
        assert parse_ris_date("2024/03/15/").date_parts == [[2024, 3, 15]]
        assert parse_ris_date("2024///").date_parts == [[2024]]

    def test_ris_date_other_part(self) -> None:
        date = parse_ris_date("2024///Spring")
        assert date.date_parts == [[2024]]
        assert date.season == "Spring"

    def test_serialize(self) -> None:
        date = PartialDate.from_parts(2024, 3, 5)
        assert serialize_date(date) == "2024-03-05"
        assert serialize_ris_date(date) == "2024/03/05"
        assert serialize_bibtex_date(date) == {
            "year": "2024",
            "month": "mar",
            "day": "5",
        }

    def test_serialize_range_and_raw(self) -> None:
        date = PartialDate(date_parts=[[2020], [2022]])
        assert serialize_date(date) == "2020/2022"
        assert serialize_date(PartialDate(raw="n.d.")) == "n.d."
        assert serialize_bibtex_date(PartialDate(raw="n.d.")) == {"year": "n.d."}
        assert serialize_date(None) == ""

    def test_serialize_literal(self) -> None:
        date = PartialDate(literal="Spring 1999")
        assert serialize_date(date) == "Spring 1999"
        assert serialize_ris_date(date) == "Spring 1999"
        assert serialize_bibtex_date(date) == {"year": "Spring 1999"}
