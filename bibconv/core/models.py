"""Core data models for the intermediate bibliography representation.

Every parser produces :class:`Entry` objects and every generator consumes
them. Field names follow CSL-JSON, so the serialized form of an entry is a
valid CSL item. Python attribute names use snake_case and are mapped onto
the CSL spelling through msgspec field renames.

Key components:
- Name: Structured or literal person/organization name
- PartialDate: CSL date with optional month/day
- FormatMetadata: Provenance and unmapped native fields
- Entry: Immutable intermediate record
- ConversionWarning / ConversionStats / ConversionResult: Parse accounting
"""

import enum
from typing import Any

import msgspec

from .entry_types import CslType
from .fields import BibFormat


class Name(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Person or organization name.

    A name is either structured (family/given plus particles and suffix) or
    a single ``literal`` string used for organizations and forms such as
    "others".
    """

    family: str | None = None
    given: str | None = None
    literal: str | None = None
    suffix: str | None = None
    dropping_particle: str | None = msgspec.field(
        default=None, name="dropping-particle"
    )
    non_dropping_particle: str | None = msgspec.field(
        default=None, name="non-dropping-particle"
    )
    comma_suffix: bool | int | str | None = msgspec.field(
        default=None, name="comma-suffix"
    )
    static_ordering: bool | int | str | None = msgspec.field(
        default=None, name="static-ordering"
    )
    parse_names: bool | int | str | None = msgspec.field(
        default=None, name="parse-names"
    )

    @property
    def is_literal(self) -> bool:
        return self.literal is not None

    @property
    def sort_name(self) -> str:
        """Family name (or literal) used for ids and sorting."""
        return self.family or self.literal or ""

    def display(self) -> str:
        """Natural-order rendering, e.g. ``Ludwig van Beethoven``."""
        if self.literal:
            return self.literal
        parts = [
            self.given,
            self.dropping_particle,
            self.non_dropping_particle,
            self.family,
        ]
        text = " ".join(p for p in parts if p)
        if self.suffix:
            text += f", {self.suffix}"
        return text


class PartialDate(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """CSL date variable.

    ``date_parts`` holds ``[[year, month?, day?]]``; a second inner list is
    the end of a range. Unknown month/day are omitted rather than zeroed.
    """

    date_parts: list[list[int]] | None = msgspec.field(default=None, name="date-parts")
    raw: str | None = None
    literal: str | None = None
    circa: bool | int | str | None = None
    season: int | str | None = None

    @classmethod
    def from_parts(
        cls,
        year: int,
        month: int | None = None,
        day: int | None = None,
        raw: str | None = None,
    ) -> "PartialDate":
        parts = [year]
        if month is not None:
            parts.append(month)
            if day is not None:
                parts.append(day)
        return cls(date_parts=[parts], raw=raw)

    def _part(self, index: int) -> int | None:
        if not self.date_parts or not self.date_parts[0]:
            return None
        first = self.date_parts[0]
        return first[index] if len(first) > index else None

    @property
    def year(self) -> int | None:
        return self._part(0)

    @property
    def month(self) -> int | None:
        return self._part(1)

    @property
    def day(self) -> int | None:
        return self._part(2)

    @property
    def is_range(self) -> bool:
        return bool(self.date_parts) and len(self.date_parts) > 1

    @property
    def text(self) -> str:
        """Free-text form of a date without parts."""
        return self.raw or self.literal or ""


class FormatMetadata(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Provenance of an entry and the native data nothing else could hold."""

    source: BibFormat
    original_type: str | None = msgspec.field(default=None, name="originalType")
    custom_fields: dict[str, Any] = msgspec.field(
        default_factory=dict, name="customFields"
    )


class Entry(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Immutable intermediate bibliography entry.

    Well-known CSL fields are typed attributes. Anything else the source
    carried lives in ``extra`` (keyed by its CSL name) or, for native fields
    without a canonical counterpart, in ``format_metadata.custom_fields``.
    """

    id: str
    type: CslType

    # Creators
    author: tuple[Name, ...] | None = None
    editor: tuple[Name, ...] | None = None
    translator: tuple[Name, ...] | None = None
    container_author: tuple[Name, ...] | None = msgspec.field(
        default=None, name="container-author"
    )
    collection_editor: tuple[Name, ...] | None = msgspec.field(
        default=None, name="collection-editor"
    )

    # Titles
    title: str | None = None
    container_title: str | None = msgspec.field(default=None, name="container-title")
    collection_title: str | None = msgspec.field(
        default=None, name="collection-title"
    )
    title_short: str | None = msgspec.field(default=None, name="title-short")

    # Dates
    issued: PartialDate | None = None
    accessed: PartialDate | None = None
    submitted: PartialDate | None = None
    event_date: PartialDate | None = msgspec.field(default=None, name="event-date")
    original_date: PartialDate | None = msgspec.field(
        default=None, name="original-date"
    )

    # Identifiers
    doi: str | None = msgspec.field(default=None, name="DOI")
    isbn: str | None = msgspec.field(default=None, name="ISBN")
    issn: str | None = msgspec.field(default=None, name="ISSN")
    pmid: str | None = msgspec.field(default=None, name="PMID")
    pmcid: str | None = msgspec.field(default=None, name="PMCID")
    url: str | None = msgspec.field(default=None, name="URL")

    # Publication details
    publisher: str | None = None
    publisher_place: str | None = msgspec.field(default=None, name="publisher-place")
    volume: str | int | None = None
    issue: str | int | None = None
    page: str | int | None = None
    number_of_pages: str | int | None = msgspec.field(
        default=None, name="number-of-pages"
    )
    edition: str | int | None = None
    chapter_number: str | int | None = msgspec.field(
        default=None, name="chapter-number"
    )

    # Academic
    abstract: str | None = None
    keyword: str | None = None
    note: str | None = None
    annote: str | None = None

    # Events
    event: str | None = None
    event_place: str | None = msgspec.field(default=None, name="event-place")

    # Legal
    authority: str | None = None
    jurisdiction: str | None = None
    call_number: str | None = msgspec.field(default=None, name="call-number")

    # Media and misc
    medium: str | None = None
    genre: str | None = None
    status: str | None = None
    language: str | None = None

    extra: dict[str, Any] = msgspec.field(default_factory=dict, name="_extra")
    format_metadata: FormatMetadata | None = msgspec.field(
        default=None, name="_formatMetadata"
    )

    def get(self, csl_field: str, default: Any = None) -> Any:
        """Look up a field by its CSL name, including ``extra`` fields."""
        attr = CSL_ATTRIBUTES.get(csl_field)
        if attr is not None and attr not in _INTERNAL_ATTRIBUTES:
            value = getattr(self, attr)
            return default if value is None else value
        return self.extra.get(csl_field, default)

    @property
    def year(self) -> int | None:
        return self.issued.year if self.issued else None

    @property
    def source(self) -> BibFormat | None:
        return self.format_metadata.source if self.format_metadata else None

    @property
    def custom_fields(self) -> dict[str, Any]:
        if self.format_metadata is None:
            return {}
        return self.format_metadata.custom_fields

    @property
    def authors_text(self) -> str:
        """Author names joined for display and matching."""
        return "; ".join(name.display() for name in self.author or ())

    def to_csl(self, include_metadata: bool = False) -> dict[str, Any]:
        """Convert to a CSL-JSON item.

        Args:
            include_metadata: Keep ``_formatMetadata`` in the output.

        Returns:
            Dictionary with only populated fields; ``extra`` fields merged in.
        """
        data = msgspec.to_builtins(self)
        extra = data.pop("_extra", {})
        if not include_metadata:
            data.pop("_formatMetadata", None)
        for key, value in extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_csl(cls, data: dict[str, Any], strict: bool = False) -> "Entry":
        """Create an Entry from a CSL-style mapping.

        Keys naming a typed field are validated by msgspec; all other keys
        are kept verbatim in ``extra``.

        Raises:
            msgspec.ValidationError: If a typed field has an unusable value.
        """
        known: dict[str, Any] = {}
        extra: dict[str, Any] = dict(data.get("_extra") or {})
        for key, value in data.items():
            if key == "_extra":
                continue
            if key in CSL_ATTRIBUTES:
                known[key] = value
            else:
                extra[key] = value
        if extra:
            known["_extra"] = extra
        return msgspec.convert(known, cls, strict=strict)


CSL_ATTRIBUTES: dict[str, str] = {
    info.encode_name: info.name for info in msgspec.structs.fields(Entry)
}

_INTERNAL_ATTRIBUTES = frozenset({"extra", "format_metadata"})

NAME_FIELDS = (
    "author",
    "editor",
    "translator",
    "container-author",
    "collection-editor",
)

DATE_FIELDS = ("issued", "accessed", "submitted", "event-date", "original-date")


class Severity(str, enum.Enum):
    """Severity of a conversion warning."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class WarningType(str, enum.Enum):
    """Category of a conversion warning."""

    TYPE_DOWNGRADE = "type-downgrade"
    FIELD_LOSS = "field-loss"
    ENCODING_LOSS = "encoding-loss"
    PARSE_ERROR = "parse-error"
    VALIDATION_ERROR = "validation-error"


class ConversionWarning(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Problem found while parsing, validating or converting."""

    entry_id: str = msgspec.field(name="entryId")
    severity: Severity
    type: WarningType
    message: str
    field: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value.upper()}] {self.entry_id}: {self.message}"


class ConversionStats(msgspec.Struct, frozen=True, kw_only=True):
    """Entry counts of one conversion; ``successful + failed == total``."""

    total: int = 0
    successful: int = 0
    with_warnings: int = msgspec.field(default=0, name="withWarnings")
    failed: int = 0


class ConversionResult(msgspec.Struct, kw_only=True):
    """Entries, warnings and statistics produced by a parser."""

    entries: list[Entry] = msgspec.field(default_factory=list)
    warnings: list[ConversionWarning] = msgspec.field(default_factory=list)
    stats: ConversionStats = msgspec.field(default_factory=ConversionStats)

    @classmethod
    def build(
        cls,
        entries: list[Entry],
        warnings: list[ConversionWarning],
        failed: int | None = None,
    ) -> "ConversionResult":
        """Assemble a result with statistics derived from its contents.

        Args:
            entries: Successfully parsed entries.
            warnings: All warnings collected.
            failed: Number of records that failed. Defaults to the number of
                error-severity warnings keyed to records that did not make it
                into ``entries``.
        """
        if failed is None:
            entry_ids = {entry.id for entry in entries}
            failed = sum(
                1 for w in warnings if w.is_error and w.entry_id not in entry_ids
            )
        return cls(
            entries=entries,
            warnings=warnings,
            stats=compute_stats(entries, warnings, failed),
        )

    @property
    def errors(self) -> list[ConversionWarning]:
        return [w for w in self.warnings if w.is_error]

    @property
    def has_errors(self) -> bool:
        return any(w.is_error for w in self.warnings)

    def with_warnings(self, extra: list[ConversionWarning]) -> "ConversionResult":
        """Copy of this result with more warnings appended."""
        warnings = [*self.warnings, *extra]
        return ConversionResult(
            entries=self.entries,
            warnings=warnings,
            stats=compute_stats(self.entries, warnings, self.stats.failed),
        )


def compute_stats(
    entries: list[Entry], warnings: list[ConversionWarning], failed: int
) -> ConversionStats:
    """Derive statistics; entries with warnings still count as successful."""
    entry_ids = {entry.id for entry in entries}
    warned = {
        w.entry_id
        for w in warnings
        if w.severity == Severity.WARNING and w.entry_id in entry_ids
    }
    return ConversionStats(
        total=len(entries) + failed,
        successful=len(entries),
        with_warnings=len(warned),
        failed=failed,
    )
