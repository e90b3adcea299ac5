"""Date parsing and serialization.

Each format writes dates differently:
- BibTeX: separate ``year``/``month``/``day`` fields, month as macro
- BibLaTeX: ISO 8601 ``date`` field, ranges as ``start/end``
- RIS: ``YYYY/MM/DD/other`` with trailing parts optional
- CSL-JSON: ``{"date-parts": [[year, month, day]]}``

All parsers return a :class:`~bibconv.core.models.PartialDate` where unknown
month and day are omitted, never zero.
"""

import re

from .models import PartialDate

MONTHS = {
    "jan": 1,
    "january": 1,
    "feb": 2,
    "february": 2,
    "mar": 3,
    "march": 3,
    "apr": 4,
    "april": 4,
    "may": 5,
    "jun": 6,
    "june": 6,
    "jul": 7,
    "july": 7,
    "aug": 8,
    "august": 8,
    "sep": 9,
    "sept": 9,
    "september": 9,
    "oct": 10,
    "october": 10,
    "nov": 11,
    "november": 11,
    "dec": 12,
    "december": 12,
}

MONTH_MACROS = {
    1: "jan",
    2: "feb",
    3: "mar",
    4: "apr",
    5: "may",
    6: "jun",
    7: "jul",
    8: "aug",
    9: "sep",
    10: "oct",
    11: "nov",
    12: "dec",
}

ISO_PATTERN = re.compile(r"^(-?\d{1,4})(?:-(\d{1,2}))?(?:-(\d{1,2}))?(?:T.*)?$")
SLASH_PATTERN = re.compile(r"^(\d{4})/(\d{1,2})(?:/(\d{1,2}))?$")
NATURAL_PATTERN = re.compile(r"^(?:(\d{1,2})\s+)?([A-Za-z]+)\.?,?\s+(\d{4})$")
CIRCA_PATTERN = re.compile(r"^(?:circa|ca\.|c\.)\s*|[~?%]$", re.IGNORECASE)


def parse_month(value: str | int | None) -> int | None:
    """Month number from a numeral, an abbreviation or a full name."""
    if value is None:
        return None
    if isinstance(value, int):
        return value if 1 <= value <= 12 else None

    text = value.strip().lower().rstrip(".")
    if text.isdigit():
        number = int(text)
        return number if 1 <= number <= 12 else None
    return MONTHS.get(text)


def _valid_day(value: str | int | None) -> int | None:
    if value is None:
        return None
    try:
        day = int(str(value).strip())
    except ValueError:
        return None
    return day if 1 <= day <= 31 else None


def _parts(year: int, month: int | None, day: int | None) -> list[int]:
    parts = [year]
    if month is not None:
        parts.append(month)
        if day is not None:
            parts.append(day)
    return parts


def _parse_single(text: str) -> list[int] | None:
    """Date parts of one non-range date, or None."""
    match = SLASH_PATTERN.match(text)
    if match:
        month = parse_month(match.group(2))
        day = _valid_day(match.group(3)) if month else None
        return _parts(int(match.group(1)), month, day)

    match = ISO_PATTERN.match(text)
    if match:
        month = parse_month(match.group(2)) if match.group(2) else None
        day = _valid_day(match.group(3)) if month else None
        return _parts(int(match.group(1)), month, day)

    match = NATURAL_PATTERN.match(text)
    if match:
        month = parse_month(match.group(2))
        if month:
            day = _valid_day(match.group(1)) if match.group(1) else None
            return _parts(int(match.group(3)), month, day)

    return None


def parse_date(text: str | None) -> PartialDate | None:
    """Parse a free-form or ISO 8601 date.

    Supports ``2024``, ``2024-03``, ``2024-03-15``, ``2024/03/15``,
    ``March 2024``, ``15 March 2024`` and ranges ``2024-03-15/2024-03-20``.
    A trailing ``~`` or ``?`` (BibLaTeX) or a ``circa`` prefix marks the
    date as approximate. Anything else is kept as ``raw``.

    Returns:
        The parsed date, or None for blank input.
    """
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None

    circa = bool(CIRCA_PATTERN.search(text))
    cleaned = CIRCA_PATTERN.sub("", text).strip() if circa else text

    single = _parse_single(cleaned)
    if single is not None:
        return PartialDate(date_parts=[single], circa=circa or None)

    if "/" in cleaned:
        start, _, end = cleaned.partition("/")
        start_parts = _parse_single(start.strip())
        end_parts = _parse_single(end.strip())
        if start_parts and end_parts:
            return PartialDate(
                date_parts=[start_parts, end_parts], circa=circa or None
            )
        if start_parts and not end.strip():
            # Open-ended range
            return PartialDate(date_parts=[start_parts], raw=text)

    year = re.search(r"\b(\d{4})\b", cleaned)
    if year:
        return PartialDate(date_parts=[[int(year.group(1))]], raw=text)

    return PartialDate(raw=text)


def parse_bibtex_date(
    year: str | int | None,
    month: str | int | None = None,
    day: str | int | None = None,
) -> PartialDate | None:
    """Combine BibTeX ``year``/``month``/``day`` fields.

    The month accepts numerals, abbreviations and full names. A day is only
    kept when the month is known.

    Returns:
        The date, or None when there is no year.
    """
    if year is None or not str(year).strip():
        return None

    text = str(year).strip()
    if not text.isdigit():
        match = re.search(r"\d{4}", text)
        if not match:
            return PartialDate(raw=text)
        text = match.group()

    month_number = parse_month(month)
    day_number = _valid_day(day) if month_number else None
    return PartialDate(date_parts=[_parts(int(text), month_number, day_number)])


def parse_ris_date(text: str | None) -> PartialDate | None:
    """Parse a RIS date, ``YYYY/MM/DD/other`` with trailing parts optional.

    Empty components are allowed (``2024///``); the free-text ``other`` part
    is kept as the season.
    """
    if text is None or not text.strip():
        return None

    parts = [p.strip() for p in text.strip().split("/")]
    match = re.match(r"^(\d{4})", parts[0])
    if not match:
        return parse_date(text)

    month = parse_month(parts[1]) if len(parts) > 1 and parts[1] else None
    day = _valid_day(parts[2]) if len(parts) > 2 and parts[2] and month else None
    season = parts[3] if len(parts) > 3 and parts[3] else None
    return PartialDate(
        date_parts=[_parts(int(match.group(1)), month, day)], season=season
    )


def _first_parts(date: PartialDate | None) -> list[int] | None:
    if date is None or not date.date_parts or not date.date_parts[0]:
        return None
    return date.date_parts[0]


def _iso(parts: list[int]) -> str:
    text = str(parts[0])
    if len(parts) > 1:
        text += f"-{parts[1]:02d}"
    if len(parts) > 2:
        text += f"-{parts[2]:02d}"
    return text


def serialize_date(date: PartialDate | None) -> str:
    """ISO 8601 form (``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD``, ranges)."""
    parts = _first_parts(date)
    if parts is None:
        return date.text if date else ""

    text = _iso(parts)
    if date.is_range and date.date_parts[1]:
        text += "/" + _iso(date.date_parts[1])
    if date.circa:
        text += "~"
    return text


def serialize_bibtex_date(date: PartialDate | None) -> dict[str, str]:
    """Split a date into BibTeX ``year``, ``month`` (macro) and ``day``."""
    parts = _first_parts(date)
    if parts is None:
        if date is not None and date.text:
            return {"year": date.text}
        return {}

    result = {"year": str(parts[0])}
    if len(parts) > 1:
        result["month"] = MONTH_MACROS.get(parts[1], str(parts[1]))
    if len(parts) > 2:
        result["day"] = str(parts[2])
    return result


def serialize_ris_date(date: PartialDate | None) -> str:
    """RIS form ``YYYY``, ``YYYY/MM`` or ``YYYY/MM/DD``."""
    parts = _first_parts(date)
    if parts is None:
        return date.text if date else ""

    text = str(parts[0])
    if len(parts) > 1:
        text += f"/{parts[1]:02d}"
    if len(parts) > 2:
        text += f"/{parts[2]:02d}"
    return text
