"""Shared generator contract and options."""

from collections.abc import Iterable
from typing import Protocol

import msgspec

from bibconv.core.fields import BibFormat
from bibconv.core.models import Entry


class GeneratorOptions(msgspec.Struct, frozen=True, kw_only=True):
    """Output options understood by every generator.

    ``indent`` is used for nested structures (fields, XML children, JSON);
    ``include_custom_fields`` re-emits native fields preserved from a
    source in the same format family.
    """

    indent: str = "  "
    line_ending: str = "\n"
    sort: bool = False
    include_custom_fields: bool = True


DEFAULT_OPTIONS = GeneratorOptions()


class Generator(Protocol):
    """Turns intermediate entries into the text of one format."""

    format: BibFormat

    def generate(
        self, entries: list[Entry], options: GeneratorOptions | None = None
    ) -> str:
        """Serialize entries; never mutates them."""
        ...


def ordered(entries: Iterable[Entry], options: GeneratorOptions) -> list[Entry]:
    """Entries in output order; sorting by id is stable."""
    if options.sort:
        return sorted(entries, key=lambda entry: entry.id)
    return list(entries)


def text_value(value: object) -> str | None:
    """Plain string form of a scalar field value, or None."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None
