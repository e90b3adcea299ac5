"""CRUD helpers over parsed entries.

Every function is pure: input lists and entries are never modified and a
new list or entry is returned.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import msgspec

from bibconv.converter import parse
from bibconv.core.entry_types import coerce_csl_type
from bibconv.core.fields import BibFormat
from bibconv.core.models import Entry

logger = logging.getLogger(__name__)

DEDUPE_KEYS = ("id", "doi")
SORT_KEYS = ("id", "author", "year")


class FilterCriteria(msgspec.Struct, frozen=True, kw_only=True):
    """Conditions an entry must all satisfy; unset conditions match anything.

    ``author`` and ``keyword`` are case-insensitive substring matches.
    """

    id: str | None = None
    author: str | None = None
    year: int | None = None
    type: str | None = None
    keyword: str | None = None


def read_entries(content: str, fmt: BibFormat | str) -> list[Entry]:
    """Parse content and keep only the entries."""
    return parse(content, fmt).entries


def _matches(entry: Entry, criteria: FilterCriteria) -> bool:
    if criteria.id is not None and entry.id != criteria.id:
        return False

    if criteria.author:
        needle = criteria.author.lower()
        names = (
            " ".join(p for p in (n.given, n.family, n.literal) if p).lower()
            for n in entry.author or ()
        )
        if not any(needle in name for name in names):
            return False

    if criteria.year is not None and entry.year != criteria.year:
        return False

    if criteria.type is not None:
        wanted = coerce_csl_type(criteria.type)
        if wanted != entry.type:
            return False

    if criteria.keyword:
        if criteria.keyword.lower() not in (entry.keyword or "").lower():
            return False

    return True


def filter_entries(
    entries: Iterable[Entry],
    criteria: FilterCriteria | Mapping[str, Any] | None = None,
) -> list[Entry]:
    """Entries matching every given criterion.

    Args:
        entries: Entries to filter.
        criteria: A :class:`FilterCriteria` or a mapping with the same keys.

    Raises:
        ValueError: If a criteria mapping has values of the wrong type.
    """
    if criteria is None:
        return list(entries)
    if not isinstance(criteria, FilterCriteria):
        try:
            criteria = msgspec.convert(dict(criteria), FilterCriteria, strict=False)
        except msgspec.ValidationError as e:
            raise ValueError(f"Invalid filter criteria: {e}") from e
    return [entry for entry in entries if _matches(entry, criteria)]


def create_entry(data: Mapping[str, Any]) -> Entry:
    """Build an entry from CSL-style data.

    Raises:
        ValueError: If ``id`` or ``type`` is missing or the type is unknown,
            or a field has an unusable value.
    """
    if not data.get("id"):
        raise ValueError("Entry must have an id")
    if not data.get("type"):
        raise ValueError("Entry must have a type")

    csl_type = coerce_csl_type(data["type"])
    if csl_type is None:
        raise ValueError(f"Unknown entry type: {data['type']}")

    fields = msgspec.to_builtins(dict(data))
    fields["id"] = str(data["id"])
    fields["type"] = csl_type.value
    try:
        return Entry.from_csl(fields)
    except msgspec.ValidationError as e:
        raise ValueError(f"Invalid entry '{fields['id']}': {e}") from e


def update_entry(entry: Entry, updates: Mapping[str, Any]) -> Entry:
    """Copy of an entry with fields replaced.

    Keys are CSL field names; a value of None removes the field. The id is
    never changed and provenance metadata is kept.

    Raises:
        ValueError: If an updated field has an unusable value.
    """
    data = entry.to_csl(include_metadata=True)
    for key, value in msgspec.to_builtins(dict(updates)).items():
        if key == "id":
            continue
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value

    if "type" in updates:
        csl_type = coerce_csl_type(updates["type"])
        if csl_type is None:
            raise ValueError(f"Unknown entry type: {updates['type']}")
        data["type"] = csl_type.value

    try:
        return Entry.from_csl(data)
    except msgspec.ValidationError as e:
        raise ValueError(f"Invalid update for '{entry.id}': {e}") from e


def delete_entries(entries: Iterable[Entry], ids: Iterable[str]) -> list[Entry]:
    """Entries whose id is not listed."""
    doomed = set(ids)
    return [entry for entry in entries if entry.id not in doomed]


def _dedupe_key(entry: Entry, by: str) -> str:
    if by == "doi" and entry.doi:
        return f"doi:{entry.doi.strip().lower()}"
    return f"id:{entry.id}"


def merge_entries(
    entry_sets: Iterable[Iterable[Entry]], dedupe_by: str = "id"
) -> list[Entry]:
    """Concatenate entry lists, keeping the first entry per key.

    Args:
        entry_sets: Lists of entries, in priority order.
        dedupe_by: ``id``, or ``doi`` (case-insensitive, entries without a
            DOI fall back to their id).

    Raises:
        ValueError: If ``dedupe_by`` is not a known key.
    """
    if dedupe_by not in DEDUPE_KEYS:
        raise ValueError(f"Cannot deduplicate by '{dedupe_by}'")

    merged = []
    seen: set[str] = set()
    for entries in entry_sets:
        for entry in entries:
            key = _dedupe_key(entry, dedupe_by)
            if key in seen:
                logger.debug(f"Skipping duplicate entry {entry.id}")
                continue
            seen.add(key)
            merged.append(entry)
    return merged


def sort_entries(entries: Iterable[Entry], by: str = "id") -> list[Entry]:
    """Stable sort by id, first author, or year (newest first).

    Raises:
        ValueError: If ``by`` is not a known key.
    """
    if by == "id":
        return sorted(entries, key=lambda e: e.id)
    if by == "author":
        return sorted(
            entries,
            key=lambda e: (e.author[0].sort_name if e.author else "").lower(),
        )
    if by == "year":
        return sorted(entries, key=lambda e: e.year or 0, reverse=True)
    raise ValueError(f"Cannot sort by '{by}'")
