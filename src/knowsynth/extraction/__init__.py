"""Structured extraction from generated text."""

from .extractor import ExtractionResult, ParseDegradation, StructuredExtractor
from .schema import ExtractionSchema, Section, SectionKind, as_schema
from .strategies import (
    FreeTextStrategy,
    HeadingStrategy,
    JsonLiteralStrategy,
    NOT_JSON,
    ZeroValueStrategy,
    parse_json_literal,
)

__all__ = [
    "ExtractionResult",
    "ExtractionSchema",
    "FreeTextStrategy",
    "HeadingStrategy",
    "JsonLiteralStrategy",
    "NOT_JSON",
    "ParseDegradation",
    "Section",
    "SectionKind",
    "StructuredExtractor",
    "ZeroValueStrategy",
    "as_schema",
    "parse_json_literal",
]
