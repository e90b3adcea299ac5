"""CSL-JSON parser.

CSL-JSON already is the intermediate representation, so parsing is mostly
validation: every item needs an ``id`` and a ``type``, typed fields are
checked by msgspec and everything else is carried in ``extra``.
"""

import json
import logging
from typing import Any

import msgspec

from bibconv.core.entry_types import DEFAULT_TYPE, coerce_csl_type
from bibconv.core.fields import BibFormat
from bibconv.core.models import (
    CSL_ATTRIBUTES,
    ConversionResult,
    ConversionWarning,
    Entry,
    WarningType,
)

from .base import (
    DOCUMENT_ID,
    document_error,
    error,
    no_entries_warning,
    warning,
)

logger = logging.getLogger(__name__)

# Keys the parser fills in itself
_BUILT_KEYS = frozenset({"id", "type", "_extra", "_formatMetadata"})


class ItemError(Exception):
    """A single CSL item that cannot become an entry."""


def _items(document: Any) -> list[Any]:
    return document if isinstance(document, list) else [document]


def _item_label(item: Any, index: int) -> str:
    if isinstance(item, dict) and item.get("id") not in (None, ""):
        return str(item["id"])
    return f"item-{index}"


def _load(content: str) -> Any:
    """Decode JSON text; raises ValueError with a readable message."""
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON parse error: {e}") from e


class CslJsonParser:
    """Parser for CSL-JSON text (a single item or an array of items)."""

    format = BibFormat.CSL_JSON

    def parse(self, content: str) -> ConversionResult:
        if not content or not content.strip():
            return ConversionResult.build([], [], failed=0)

        try:
            document = _load(content)
        except ValueError as e:
            logger.warning(str(e))
            return document_error(str(e))

        entries: list[Entry] = []
        warnings: list[ConversionWarning] = []
        seen: set[str] = set()
        failed = 0

        for index, item in enumerate(_items(document)):
            label = _item_label(item, index)
            try:
                entry, notes = self.build(item, index, seen)
            except ItemError as e:
                warnings.append(error(label, str(e)))
                failed += 1
                continue
            seen.add(entry.id)
            entries.append(entry)
            warnings.extend(notes)

        logger.debug(f"Parsed {len(entries)} CSL-JSON items ({failed} failed)")
        return ConversionResult.build(entries, warnings, failed=failed)

    def build(
        self, item: Any, index: int, seen: set[str]
    ) -> tuple[Entry, list[ConversionWarning]]:
        """Turn one CSL item into an entry.

        Raises:
            ItemError: If the item is not an object, lacks ``id``/``type`` or
                repeats an id.
        """
        if not isinstance(item, dict):
            raise ItemError(f"Item at index {index} is not an object")

        raw_id = item.get("id")
        if raw_id is None or raw_id == "":
            raise ItemError(f"Entry at index {index} missing required 'id' field")
        entry_id = str(raw_id)

        raw_type = item.get("type")
        if raw_type is None or raw_type == "":
            raise ItemError(f"Entry '{entry_id}' missing required 'type' field")

        if entry_id in seen:
            raise ItemError(f"Duplicate entry id '{entry_id}'")

        notes = []
        csl_type = coerce_csl_type(raw_type)
        if csl_type is None:
            csl_type = DEFAULT_TYPE
            notes.append(
                warning(
                    entry_id,
                    f"Unknown CSL type '{raw_type}', using '{csl_type.value}'",
                    WarningType.TYPE_DOWNGRADE,
                )
            )

        data = {k: v for k, v in item.items() if k != "_formatMetadata"}
        data["id"] = entry_id
        data["type"] = csl_type.value
        data["_formatMetadata"] = {"source": BibFormat.CSL_JSON.value}

        try:
            entry = Entry.from_csl(data)
        except msgspec.ValidationError:
            data = self.demote_invalid(entry_id, data, notes)
            try:
                entry = Entry.from_csl(data)
            except msgspec.ValidationError as e:
                raise ItemError(f"Entry '{entry_id}': {e}") from e
        return entry, notes

    def demote_invalid(
        self, entry_id: str, data: dict[str, Any], notes: list[ConversionWarning]
    ) -> dict[str, Any]:
        """Move typed fields with unusable values into ``extra``.

        Each field is checked on its own so one bad value never costs the
        whole item. The value is kept verbatim and a warning is recorded.
        """
        kept: dict[str, Any] = {}
        extra = dict(data.get("_extra") or {})
        for key, value in data.items():
            if key in CSL_ATTRIBUTES and key not in _BUILT_KEYS:
                try:
                    Entry.from_csl({"id": entry_id, "type": data["type"], key: value})
                except msgspec.ValidationError as e:
                    extra[key] = value
                    notes.append(
                        warning(
                            entry_id,
                            f"Field '{key}' kept as an untyped value: {e}",
                            WarningType.FIELD_LOSS,
                            field=key,
                        )
                    )
                    continue
            if key != "_extra":
                kept[key] = value
        if extra:
            kept["_extra"] = extra
        return kept

    def validate(self, content: str) -> list[ConversionWarning]:
        """Check JSON syntax, document shape and required item keys."""
        if not content or not content.strip():
            return [no_entries_warning()]

        try:
            document = _load(content)
        except ValueError as e:
            return [error(DOCUMENT_ID, str(e))]

        if not isinstance(document, (dict, list)):
            return [
                error(
                    DOCUMENT_ID,
                    "CSL JSON must be an object or array of objects",
                    WarningType.VALIDATION_ERROR,
                )
            ]

        warnings = []
        items = _items(document)
        for index, item in enumerate(items):
            label = _item_label(item, index)
            if not isinstance(item, dict):
                warnings.append(
                    error(
                        label,
                        f"Item at index {index} is not an object",
                        WarningType.VALIDATION_ERROR,
                    )
                )
                continue
            if item.get("id") in (None, ""):
                warnings.append(
                    error(
                        label,
                        f"Item at index {index} missing required 'id' field",
                        WarningType.VALIDATION_ERROR,
                    )
                )
            if item.get("type") in (None, ""):
                warnings.append(
                    error(
                        label,
                        f"Item '{label}' missing required 'type' field",
                        WarningType.VALIDATION_ERROR,
                    )
                )

        if not items:
            warnings.append(no_entries_warning())
        return warnings
