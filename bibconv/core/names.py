"""Person name parsing and serialization.

Names are split into First/von/Last/Jr parts following BibTeX's rules and
then mapped onto :class:`~bibconv.core.models.Name`.
"""

import re
from dataclasses import dataclass

from .models import Name

# Lists that end in "and others" use this literal
OTHERS = "others"


@dataclass
class NameParts:
    """Name split into its four BibTeX components."""

    first: list[str]
    von: list[str]
    last: list[str]
    jr: list[str]

    def is_empty(self) -> bool:
        """Check if name is empty."""
        return not any([self.first, self.von, self.last, self.jr])

    def to_name(self) -> Name:
        return Name(
            family=_join(self.last),
            given=_join(self.first),
            non_dropping_particle=_join(self.von),
            suffix=_join(self.jr),
        )


def _join(tokens: list[str]) -> str | None:
    text = " ".join(t.replace("{", "").replace("}", "") for t in tokens).strip()
    return text or None


class NameParser:
    """Parse names according to BibTeX rules."""

    @staticmethod
    def parse(name: str, suffix_last: bool = False) -> NameParts:
        """
        Parse name according to BibTeX's three formats.

        Format determined by comma count:
        - 0 commas: "First von Last"
        - 1 comma: "von Last, First"
        - 2 commas: "von Last, Jr, First"

        With ``suffix_last`` the two-comma form is read as
        "Last, First, Suffix", the order RIS and EndNote use.
        """
        name = name.strip()
        if not name:
            return NameParts([], [], [], [])

        parts = NameParser._split_commas(name)

        if len(parts) == 1:
            return NameParser._parse_first_von_last(name)
        if len(parts) == 2:
            return NameParser._parse_von_last_first(parts[0], parts[1])

        # Anything past the second comma belongs to the last part
        head, middle, tail = parts[0], parts[1], ", ".join(parts[2:])
        if suffix_last:
            return NameParser._parse_von_last_first(head, middle, jr=tail)
        return NameParser._parse_von_last_first(head, tail, jr=middle)

    @staticmethod
    def _split_commas(name: str) -> list[str]:
        """Split on commas outside braces."""
        parts = []
        current = []
        depth = 0
        for char in name:
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            elif char == "," and depth == 0:
                parts.append("".join(current).strip())
                current = []
                continue
            current.append(char)
        parts.append("".join(current).strip())
        return parts

    @staticmethod
    def _tokenize(name: str) -> list[str]:
        """Split name into tokens, preserving braced groups."""
        tokens = []
        current = []
        brace_level = 0

        for char in name:
            if char == "{":
                brace_level += 1
                current.append(char)
            elif char == "}":
                brace_level -= 1
                current.append(char)
            elif char in " \t\n~" and brace_level == 0:
                if current:
                    tokens.append("".join(current))
                    current = []
            else:
                current.append(char)

        if current:
            tokens.append("".join(current))

        return [token for token in tokens if token]

    @staticmethod
    def _starts_with_lowercase(word: str) -> bool:
        """
        Check if word starts with lowercase letter.

        Braced words are never von; the first real letter decides.
        """
        if word.startswith("{") and word.endswith("}"):
            return False

        for char in word:
            if char.isalpha():
                return char.islower()

        return False

    @staticmethod
    def _parse_first_von_last(name: str) -> NameParts:
        """Parse 'First von Last' format."""
        tokens = NameParser._tokenize(name)

        if not tokens:
            return NameParts([], [], [], [])

        if len(tokens) == 1:
            return NameParts([], [], tokens, [])

        # von is the run of lowercase words; Last keeps at least one token
        von_start = None
        von_end = None

        for i in range(len(tokens) - 1):
            if NameParser._starts_with_lowercase(tokens[i]):
                if von_start is None:
                    von_start = i
                von_end = i
            elif von_start is not None:
                break

        if von_start is not None and von_end is not None:
            first = tokens[:von_start]
            von = tokens[von_start : von_end + 1]
            last = tokens[von_end + 1 :]
        else:
            first = tokens[:-1]
            von = []
            last = tokens[-1:]

        return NameParts(first, von, last, [])

    @staticmethod
    def _parse_von_last_first(von_last: str, first: str, jr: str = "") -> NameParts:
        """Parse 'von Last, [Jr,] First' format."""
        tokens = NameParser._tokenize(von_last)
        first_tokens = NameParser._tokenize(first)
        jr_tokens = NameParser._tokenize(jr)

        if not tokens:
            return NameParts(first_tokens, [], [], jr_tokens)

        von_end = -1
        for i in range(len(tokens) - 1):
            if NameParser._starts_with_lowercase(tokens[i]):
                von_end = i

        if von_end >= 0:
            von = tokens[: von_end + 1]
            last = tokens[von_end + 1 :]
        else:
            von = []
            last = tokens

        return NameParts(first_tokens, von, last, jr_tokens)


def _is_literal(text: str) -> bool:
    """Whole name wrapped in one brace group, e.g. ``{World Health Organization}``."""
    if not (text.startswith("{") and text.endswith("}")):
        return False
    depth = 0
    for i, char in enumerate(text):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0 and i != len(text) - 1:
                return False
    return True


def parse_name(text: str, suffix_last: bool = False) -> Name | None:
    """Parse one name.

    Args:
        text: Name as written in the source.
        suffix_last: Read "Last, First, Suffix" instead of BibTeX's
            "Last, Jr, First".

    Returns:
        Structured or literal name, or None for blank input.
    """
    text = text.strip()
    if not text:
        return None

    if _is_literal(text):
        return Name(literal=text[1:-1].strip())

    if text.lower() == OTHERS:
        return Name(literal=OTHERS)

    parts = NameParser.parse(text, suffix_last=suffix_last)
    if parts.is_empty():
        return None
    return parts.to_name()


def split_names(text: str) -> list[str]:
    """Split a BibTeX name list on ``and`` outside braces."""
    names = []
    current = []
    depth = 0
    i = 0
    while i < len(text):
        char = text[i]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        elif depth == 0 and char.isspace():
            match = re.match(r"\s+and\s+", text[i:])
            if match:
                names.append("".join(current))
                current = []
                i += match.end()
                continue
        current.append(char)
        i += 1
    names.append("".join(current))
    return [name.strip() for name in names if name.strip()]


def parse_names(text: str) -> tuple[Name, ...]:
    """Parse an ``and``-separated BibTeX name list."""
    if not text or not text.strip():
        return ()
    names = (parse_name(part) for part in split_names(text))
    return tuple(name for name in names if name is not None)


def serialize_name(name: Name, style: str = "bibtex") -> str:
    """Render a name for output.

    Styles:
    - ``bibtex``: "von Last, Jr, First", literals braced
    - ``ris``: "Last, First, Suffix", particles kept with the family name
    - ``natural``: "First von Last, Suffix"
    """
    if name.literal:
        if style == "bibtex" and name.literal != OTHERS:
            return f"{{{name.literal}}}"
        return name.literal

    if style == "natural":
        return name.display()

    family = " ".join(
        p
        for p in (name.non_dropping_particle, name.dropping_particle, name.family)
        if p
    )
    if style == "bibtex":
        if name.suffix:
            return f"{family}, {name.suffix}, {name.given or ''}".rstrip()
        if name.given:
            return f"{family}, {name.given}"
        return family

    parts = [family, name.given, name.suffix]
    return ", ".join(p for p in parts if p)


def serialize_names(names, style: str = "bibtex") -> str:
    """Render a BibTeX name list joined with ``and``."""
    return " and ".join(serialize_name(name, style) for name in names)
