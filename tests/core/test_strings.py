"""Tests for @string macro handling."""

from bibconv.core.strings import CaseInsensitiveDict, MacroTable


class TestMacroTable:
    """Test macro definitions and lookup."""

    def test_predefined_month_abbreviations(self) -> None:
        """Month abbreviations should be predefined."""
        table = MacroTable()

        assert table.resolve("jan") == "January"
        assert table.resolve("dec") == "December"
        assert table.resolve("Sep") == "September"

    def test_define_and_resolve(self) -> None:
        table = MacroTable()
        table.define("LNCS", "Lecture Notes in Computer Science")

        assert table.resolve("lncs") == "Lecture Notes in Computer Science"
        assert table.resolve("Lncs") == table.resolve("LNCS")

    def test_override_predefined(self) -> None:
        """A document may redefine a month macro."""
        table = MacroTable()
        table.define("mar", "Mar.")

        assert table.resolve("MAR") == "Mar."

    def test_undefined(self) -> None:
        assert MacroTable().resolve("ieee") is None

    def test_tables_are_independent(self) -> None:
        """Definitions never leak between tables."""
        first = MacroTable()
        first.define("acm", "ACM")

        assert MacroTable().resolve("acm") is None


class TestCaseInsensitiveDict:
    """Test the case-insensitive mapping."""

    def test_keys_ignore_case(self) -> None:
        data = CaseInsensitiveDict({"SIGPLAN": "ACM SIGPLAN"})

        assert data["sigplan"] == "ACM SIGPLAN"
        assert data["SigPlan"] == "ACM SIGPLAN"
        assert data.get("missing", "x") == "x"
