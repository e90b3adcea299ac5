"""BibTeX parser.

Records are read by an explicit depth-counting character scanner, so
nested groups such as ``{The {RNA} World}`` survive intact.

Features:
- ``{...}`` and ``(...)`` record delimiters
- ``@string`` macros with the predefined month names, case-insensitive
- ``#`` concatenation of quoted, braced, numeric and macro operands
- ``@preamble``/``@comment`` blocks and ``%`` line comments ignored
- Error recovery: a broken record is reported and scanning resumes at the
  next line starting with ``@``
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field

from bibconv.core.dates import parse_bibtex_date, parse_date
from bibconv.core.entry_types import is_known_native_type, normalize_to_csl_type
from bibconv.core.errors import RecordSyntaxError
from bibconv.core.fields import (
    FIELD_MAPPINGS,
    BibFormat,
    Transform,
    csl_field_from_bibtex,
)
from bibconv.core.latex import decode_latex, decode_verbatim
from bibconv.core.models import (
    ConversionResult,
    ConversionWarning,
    Entry,
    FormatMetadata,
    WarningType,
)
from bibconv.core.names import parse_names
from bibconv.core.strings import MacroTable

from .base import DOCUMENT_ID, build_entry, error, no_entries_warning, warning

logger = logging.getLogger(__name__)

# Fields combined into ``issued`` after all fields are read
DATE_PART_FIELDS = ("year", "month", "day", "date")

# Values copied without LaTeX decoding
VERBATIM_FIELDS = frozenset({"URL", "DOI"})

IGNORED_COMMANDS = frozenset({"comment", "preamble"})

# Key of syntax errors raised outside entries
DIRECTIVE = "@directive"

RECORD_START = re.compile(r"^[ \t]*@", re.MULTILINE)
ENTRY_MARKER = re.compile(r"@\s*(?!(?:string|comment|preamble)\b)\w+\s*[{(]", re.I)


@dataclass
class RawRecord:
    """One ``@type{key, ...}`` record before normalization."""

    entry_type: str
    key: str
    line: int
    fields: dict[str, str] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)


class BibtexScanner:
    """Character scanner producing raw records.

    Macro definitions go into the table passed in; create one table per
    document.
    """

    def __init__(self, text: str, macros: MacroTable):
        self.text = text
        self.pos = 0
        self.macros = macros
        self.records: list[RawRecord] = []
        self.errors: list[RecordSyntaxError] = []
        self.problems: list[RecordSyntaxError] = []

    def current_char(self) -> str | None:
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, len(self.text))

    def read_until(self, predicate: Callable[[str], bool]) -> str:
        start = self.pos
        while self.pos < len(self.text) and predicate(self.text[self.pos]):
            self.pos += 1
        return self.text[start : self.pos]

    def read_identifier(self) -> str:
        return self.read_until(lambda c: c.isalnum() or c in "_-:.+/'")

    def skip_line(self) -> None:
        self.read_until(lambda c: c != "\n")

    def skip_whitespace(self) -> None:
        """Skip whitespace and ``%`` comments."""
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char.isspace():
                self.pos += 1
            elif char == "%":
                self.skip_line()
            else:
                return

    def syntax_error(
        self, message: str, key: str | None = None, pos: int | None = None
    ) -> RecordSyntaxError:
        pos = self.pos if pos is None else pos
        line = self.text.count("\n", 0, pos) + 1
        column = pos - (self.text.rfind("\n", 0, pos) + 1) + 1
        return RecordSyntaxError(message, line=line, column=column, key=key)

    def scan(self) -> "BibtexScanner":
        """Scan the whole text; text outside records is ignored."""
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "@":
                start = self.pos
                try:
                    self.read_command()
                except RecordSyntaxError as exc:
                    self.record_failure(exc)
                    self.resync(start)
            elif char == "%":
                self.skip_line()
            else:
                self.pos += 1
        return self

    def record_failure(self, exc: RecordSyntaxError) -> None:
        if exc.key == DIRECTIVE:
            self.problems.append(exc)
            return
        if not exc.key:
            exc.key = f"entry{len(self.records) + len(self.errors) + 1}"
        logger.debug(f"Skipping record {exc.key}: {exc}")
        self.errors.append(exc)

    def resync(self, start: int) -> None:
        """Continue at the next line that starts with ``@``."""
        newline = self.text.find("\n", start)
        if newline == -1:
            self.pos = len(self.text)
            return
        match = RECORD_START.search(self.text, newline + 1)
        self.pos = match.end() - 1 if match else len(self.text)

    def read_command(self) -> None:
        """Read one ``@`` command starting at the current position."""
        record_start = self.pos
        self.advance()
        self.skip_whitespace()
        command = self.read_until(lambda c: c.isalnum() or c in "_-")
        if not command:
            return

        self.skip_whitespace()
        opener = self.current_char()
        if opener not in ("{", "("):
            # Free text such as an e-mail address
            return
        closing = "}" if opener == "{" else ")"
        self.advance()

        kind = command.lower()
        if kind in IGNORED_COMMANDS:
            self.skip_block(opener, closing, record_start)
        elif kind == "string":
            self.read_string_definition(closing)
        else:
            self.read_entry(command, closing, record_start)

    def skip_block(self, opener: str, closing: str, record_start: int) -> None:
        depth = 1
        while self.pos < len(self.text):
            char = self.text[self.pos]
            self.pos += 1
            if char == opener:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return
        raise self.syntax_error("Unterminated block", DIRECTIVE, record_start)

    def read_string_definition(self, closing: str) -> None:
        self.skip_whitespace()
        name = self.read_identifier()
        if not name:
            raise self.syntax_error("Expected macro name in @string", DIRECTIVE)
        self.skip_whitespace()
        if self.current_char() != "=":
            raise self.syntax_error(f"Expected '=' after macro '{name}'", DIRECTIVE)
        self.advance()
        self.skip_whitespace()
        value = self.read_value(DIRECTIVE)
        self.skip_whitespace()
        if self.current_char() != closing:
            raise self.syntax_error(f"Expected '{closing}' after @string", DIRECTIVE)
        self.advance()
        self.macros.define(name, value)

    def read_entry(self, entry_type: str, closing: str, record_start: int) -> None:
        line = self.text.count("\n", 0, record_start) + 1
        self.skip_whitespace()
        key = self.read_until(lambda c: c not in ',{}()="#%' and not c.isspace())
        self.skip_whitespace()

        char = self.current_char()
        if not key or char == "=":
            raise self.syntax_error("Missing citation key", pos=record_start)

        record = RawRecord(entry_type=entry_type, key=key, line=line)
        if char == closing:
            self.advance()
            self.records.append(record)
            return
        if char != ",":
            raise self.syntax_error("Expected ',' after citation key", key)
        self.advance()

        while True:
            self.skip_whitespace()
            char = self.current_char()
            if char is None:
                raise self.syntax_error(
                    f"Unterminated entry, missing '{closing}'", key, record_start
                )
            if char == closing:
                self.advance()
                break
            if char == ",":
                self.advance()
                continue

            name = self.read_identifier().lower()
            if not name:
                raise self.syntax_error(f"Unexpected character {char!r}", key)
            self.skip_whitespace()
            if self.current_char() != "=":
                raise self.syntax_error(f"Expected '=' after field '{name}'", key)
            self.advance()
            self.skip_whitespace()

            value = self.read_value(key, record)
            if name in record.fields:
                record.notes.append(f"Duplicate field '{name}' ignored")
            else:
                record.fields[name] = value

            self.skip_whitespace()
            char = self.current_char()
            if char is None:
                raise self.syntax_error(
                    f"Unterminated entry, missing '{closing}'", key, record_start
                )
            if char not in (",", closing):
                raise self.syntax_error(
                    f"Expected ',' or '{closing}' after field '{name}'", key
                )

        self.records.append(record)

    def read_value(self, key: str, record: RawRecord | None = None) -> str:
        """Read a value, resolving macros and ``#`` concatenation."""
        parts = []
        while True:
            char = self.current_char()
            if char == "{":
                parts.append(self.read_braced(key))
            elif char == '"':
                parts.append(self.read_quoted(key))
            elif char is not None and char.isdigit():
                parts.append(self.read_until(str.isalnum))
            elif char is not None and (char.isalpha() or char == "_"):
                name = self.read_identifier()
                expansion = self.macros.resolve(name)
                if expansion is None:
                    if record is not None:
                        record.notes.append(f"Undefined macro '{name}'")
                    expansion = name
                parts.append(expansion)
            else:
                raise self.syntax_error("Expected field value", key)

            self.skip_whitespace()
            if self.current_char() != "#":
                break
            self.advance()
            self.skip_whitespace()

        return re.sub(r"\s+", " ", "".join(parts)).strip()

    def read_braced(self, key: str) -> str:
        """Read ``{...}`` with balanced inner braces; returns the inner text."""
        start = self.pos
        self.advance()
        depth = 1
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    value = self.text[start + 1 : self.pos]
                    self.pos += 1
                    return value
            self.pos += 1
        raise self.syntax_error("Unterminated braced value", key, start)

    def read_quoted(self, key: str) -> str:
        """Read ``"..."``; quotes inside braces do not end the value."""
        start = self.pos
        self.advance()
        depth = 0
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            elif char == '"' and depth <= 0:
                value = self.text[start + 1 : self.pos]
                self.pos += 1
                return value
            self.pos += 1
        raise self.syntax_error("Unterminated quoted value", key, start)


def _normalize_page(value: str) -> str:
    return re.sub(r"\s*(?:-{1,3}|–|—)\s*", "-", value.strip())


class BibtexParser:
    """Parser for BibTeX text.

    Each call to :meth:`parse` uses a fresh macro table, so one instance can
    be reused but not shared between threads mid-call.
    """

    format = BibFormat.BIBTEX

    def parse(self, content: str) -> ConversionResult:
        scanner = BibtexScanner(content or "", MacroTable()).scan()

        entries: list[Entry] = []
        warnings: list[ConversionWarning] = []
        failed = 0

        for problem in scanner.problems:
            warnings.append(warning(DOCUMENT_ID, str(problem)))

        items = [(record.line, record, None) for record in scanner.records]
        items += [(exc.line, None, exc) for exc in scanner.errors]
        items.sort(key=lambda item: item[0])

        seen: set[str] = set()
        for _, record, exc in items:
            if exc is None:
                try:
                    entry, notes = self.build(record, seen)
                except RecordSyntaxError as duplicate:
                    exc = duplicate
                else:
                    entries.append(entry)
                    warnings.extend(notes)
                    seen.add(entry.id)
                    continue
            failed += 1
            warnings.append(error(exc.key or DOCUMENT_ID, str(exc)))

        logger.debug(f"Parsed {len(entries)} {self.format.value} entries")
        return ConversionResult.build(entries, warnings, failed=failed)

    def build(
        self, record: RawRecord, seen: set[str]
    ) -> tuple[Entry, list[ConversionWarning]]:
        """Normalize a raw record into an entry plus its warnings.

        Raises:
            RecordSyntaxError: If the citation key was already used.
        """
        key = record.key
        if key in seen:
            raise RecordSyntaxError(
                f"Duplicate citation key '{key}'", line=record.line, key=key
            )

        native_type = record.entry_type.lower()
        csl_type = normalize_to_csl_type(native_type, BibFormat.BIBTEX)
        notes = [warning(key, note) for note in record.notes]
        if not is_known_native_type(native_type, BibFormat.BIBTEX):
            notes.append(
                warning(
                    key,
                    f"Unknown entry type '@{native_type}', using '{csl_type.value}'",
                    WarningType.TYPE_DOWNGRADE,
                )
            )

        values: dict[str, object] = {}
        custom: dict[str, str] = {}
        fields = record.fields

        for name, raw in fields.items():
            if name in DATE_PART_FIELDS:
                continue
            csl_field = csl_field_from_bibtex(name)
            if csl_field is None or csl_field in values:
                custom[name] = raw
                continue
            values[csl_field] = self.convert_value(csl_field, raw)

        issued = parse_bibtex_date(
            fields.get("year"), fields.get("month"), fields.get("day")
        )
        if issued is None:
            issued = parse_date(fields.get("date"))
            custom.update(
                {name: fields[name] for name in ("month", "day") if name in fields}
            )
        elif "date" in fields:
            custom["date"] = fields["date"]
        values["issued"] = issued

        metadata = FormatMetadata(
            source=BibFormat.BIBTEX,
            original_type=native_type,
            custom_fields=custom,
        )
        return build_entry(key, csl_type, values, metadata), notes

    def convert_value(self, csl_field: str, raw: str) -> object:
        mapping = FIELD_MAPPINGS.get(csl_field)
        transform = mapping.transform if mapping else None

        if transform == Transform.NAME:
            return parse_names(decode_latex(raw))
        if transform == Transform.DATE:
            return parse_date(decode_verbatim(raw))
        if csl_field in VERBATIM_FIELDS:
            return decode_verbatim(raw)
        if transform == Transform.PAGE_RANGE:
            return _normalize_page(decode_latex(raw))
        return decode_latex(raw)

    def validate(self, content: str) -> list[ConversionWarning]:
        """Check brace balance and record syntax."""
        text = content or ""
        warnings: list[ConversionWarning] = []

        depth = 0
        i = 0
        while i < len(text):
            char = text[i]
            if char == "\\":
                i += 2
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth < 0:
                    line = text.count("\n", 0, i) + 1
                    warnings.append(
                        error(
                            DOCUMENT_ID,
                            f"Unmatched closing brace at position {i} (line {line})",
                        )
                    )
                    depth = 0
            i += 1

        if depth > 0:
            warnings.append(error(DOCUMENT_ID, f"{depth} unclosed brace(s)"))

        scanner = BibtexScanner(text, MacroTable()).scan()
        for exc in scanner.errors:
            warnings.append(error(exc.key or DOCUMENT_ID, str(exc)))
        for exc in scanner.problems:
            warnings.append(warning(DOCUMENT_ID, str(exc)))

        if not ENTRY_MARKER.search(text):
            warnings.append(no_entries_warning())

        return warnings
