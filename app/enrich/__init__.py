"""Normalization, schema and structured extraction for investor profiles."""

from .normalizer import IdentifierNormalizer
from .schema import ExtractionSchema, SchemaField, build_extraction_schema
from .llm_parser import ExtractionClient
from .coercion import build_profile_update

__all__ = [
    "IdentifierNormalizer",
    "ExtractionSchema",
    "SchemaField",
    "build_extraction_schema",
    "ExtractionClient",
    "build_profile_update",
]
