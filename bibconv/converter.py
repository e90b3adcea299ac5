"""Conversion orchestration.

Parses text with the parser of the source format, generates text with the
generator of the target format and keeps the parse accounting so callers
can report round-trip problems.

Key functions:
- detect_format: Sniff the format of raw content
- parse / generate / validate: Dispatch to one format
- convert: Parse then generate, flagging lossy type mappings
"""

import json
import logging
import re

import msgspec

from bibconv.core.entry_types import denormalize_from_csl_type
from bibconv.core.errors import FormatDetectionError
from bibconv.core.fields import BibFormat
from bibconv.core.models import ConversionResult, ConversionWarning, Entry, WarningType
from bibconv.generators import GeneratorOptions, get_generator
from bibconv.parsers import get_parser
from bibconv.parsers.base import warning

logger = logging.getLogger(__name__)

BIBTEX_RECORD = re.compile(r"@\w+\s*[{(]")
BIBLATEX_MARKERS = re.compile(
    r"@(?:dataset|software|online|patent|report|thesis|mvbook|collection)\s*[{(]"
    r"|\b(?:journaltitle|eventtitle)\s*=",
    re.IGNORECASE,
)
RIS_RECORD = re.compile(r"^TY\s+-", re.MULTILINE)
ENDNOTE_RECORD = re.compile(r"<records?>|<record\s")


class ConversionOutput(msgspec.Struct, kw_only=True):
    """Generated text together with the parse result it came from."""

    output: str
    result: ConversionResult


def get_supported_formats() -> list[BibFormat]:
    return list(BibFormat)


def _looks_like_csl(text: str) -> bool:
    if not text.startswith(("[", "{")):
        return False
    try:
        document = json.loads(text)
    except ValueError:
        return False
    return isinstance(document, (list, dict))


def detect_format(content: str) -> BibFormat | None:
    """Guess the format of raw content.

    Returns:
        The detected format, or None when no format or more than one
        text format matches.
    """
    text = (content or "").lstrip("\ufeff").strip()
    if not text:
        return None

    if _looks_like_csl(text):
        return BibFormat.CSL_JSON

    if text.startswith("<") and ENDNOTE_RECORD.search(text):
        return BibFormat.ENDNOTE

    is_bibtex = bool(BIBTEX_RECORD.search(text))
    is_ris = bool(RIS_RECORD.search(text))
    if is_bibtex and is_ris:
        logger.debug("Content looks like both BibTeX and RIS")
        return None
    if is_ris:
        return BibFormat.RIS
    if is_bibtex:
        if BIBLATEX_MARKERS.search(text):
            return BibFormat.BIBLATEX
        return BibFormat.BIBTEX
    return None


def parse(content: str, fmt: BibFormat | str) -> ConversionResult:
    """Parse content of a known format.

    Raises:
        UnsupportedFormatError: If the format has no parser.
    """
    return get_parser(fmt).parse(content)


def generate(
    entries: list[Entry],
    fmt: BibFormat | str,
    options: GeneratorOptions | None = None,
) -> str:
    """Serialize entries to a format.

    Raises:
        UnsupportedFormatError: If the format has no generator.
    """
    return get_generator(fmt).generate(entries, options)


def validate(content: str, fmt: BibFormat | str) -> list[ConversionWarning]:
    """Syntax-check content with the parser of its format."""
    return get_parser(fmt).validate(content)


def downgrade_warnings(
    entries: list[Entry], fmt: BibFormat | str
) -> list[ConversionWarning]:
    """One type-downgrade warning per entry whose type is lossy in a format."""
    fmt = BibFormat.coerce(fmt)
    warnings = []
    for entry in entries:
        mapping = denormalize_from_csl_type(entry.type, fmt)
        if mapping.lossy:
            warnings.append(
                warning(
                    entry.id,
                    f"Type '{entry.type.value}' has no {fmt.value} equivalent, "
                    f"written as '{mapping.type}'",
                    WarningType.TYPE_DOWNGRADE,
                )
            )
    return warnings


def convert(
    content: str,
    from_format: BibFormat | str | None,
    to_format: BibFormat | str,
    options: GeneratorOptions | None = None,
) -> ConversionOutput:
    """Convert content between formats.

    Args:
        content: Source text.
        from_format: Source format; detected from the content when None.
        to_format: Target format.
        options: Generator options.

    Returns:
        The generated text and the parse result, extended with a
        type-downgrade warning for every entry the target cannot type.

    Raises:
        FormatDetectionError: If ``from_format`` is None and detection fails.
        UnsupportedFormatError: If either format is unknown.
    """
    if from_format is None:
        from_format = detect_format(content)
        if from_format is None:
            raise FormatDetectionError()
        logger.info(f"Detected input format: {from_format.value}")

    parser = get_parser(from_format)
    generator = get_generator(to_format)

    result = parser.parse(content)
    output = generator.generate(result.entries, options)
    result = result.with_warnings(downgrade_warnings(result.entries, to_format))

    logger.info(
        f"Converted {result.stats.successful}/{result.stats.total} entries "
        f"from {parser.format.value} to {generator.format.value}"
    )
    return ConversionOutput(output=output, result=result)
