"""Data models for Investor Research."""

from .investor import (
    INVESTOR_TYPES,
    IdentifierKind,
    CanonicalIdentifier,
    ClassificationSummary,
    ClassificationResult,
    OutcomeStatus,
    ResearchOutcome,
)

__all__ = [
    "INVESTOR_TYPES",
    "IdentifierKind",
    "CanonicalIdentifier",
    "ClassificationSummary",
    "ClassificationResult",
    "OutcomeStatus",
    "ResearchOutcome",
]
