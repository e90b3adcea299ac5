"""Bibliographic format conversion.

Parses BibTeX, BibLaTeX, RIS, CSL-JSON and EndNote XML into one
intermediate entry model and generates any of them back.
"""

__version__ = "0.1.0"

from bibconv.converter import (
    ConversionOutput,
    convert,
    detect_format,
    generate,
    get_supported_formats,
    parse,
    validate,
)
from bibconv.core.fields import BibFormat
from bibconv.core.models import ConversionResult, ConversionWarning, Entry
from bibconv.generators import GeneratorOptions, get_generator
from bibconv.parsers import get_parser

__all__ = [
    "__version__",
    "BibFormat",
    "ConversionOutput",
    "ConversionResult",
    "ConversionWarning",
    "Entry",
    "GeneratorOptions",
    "convert",
    "detect_format",
    "generate",
    "get_generator",
    "get_parser",
    "get_supported_formats",
    "parse",
    "validate",
]
