"""Core models, mapping tables and text helpers for bibliography conversion."""

# Formats and fields
from bibconv.core.fields import (
    FIELD_MAPPINGS,
    BibFormat,
    FieldMapping,
    Transform,
)

# Entry types
from bibconv.core.entry_types import (
    ENTRY_TYPE_MAPPINGS,
    CslType,
    TypeMapping,
    denormalize_from_csl_type,
    normalize_to_csl_type,
)

# Models
from bibconv.core.models import (
    ConversionResult,
    ConversionStats,
    ConversionWarning,
    Entry,
    FormatMetadata,
    Name,
    PartialDate,
    Severity,
    WarningType,
)

# Errors
from bibconv.core.errors import (
    BibconvError,
    FormatDetectionError,
    RecordSyntaxError,
    UnsupportedFormatError,
)

# Names, dates and LaTeX
from bibconv.core.dates import parse_date, serialize_date
from bibconv.core.latex import decode_latex, encode_latex
from bibconv.core.names import NameParser, parse_names, serialize_names

__all__ = [
    "FIELD_MAPPINGS",
    "BibFormat",
    "FieldMapping",
    "Transform",
    "ENTRY_TYPE_MAPPINGS",
    "CslType",
    "TypeMapping",
    "denormalize_from_csl_type",
    "normalize_to_csl_type",
    "ConversionResult",
    "ConversionStats",
    "ConversionWarning",
    "Entry",
    "FormatMetadata",
    "Name",
    "PartialDate",
    "Severity",
    "WarningType",
    "BibconvError",
    "FormatDetectionError",
    "RecordSyntaxError",
    "UnsupportedFormatError",
    "parse_date",
    "serialize_date",
    "decode_latex",
    "encode_latex",
    "NameParser",
    "parse_names",
    "serialize_names",
]
