"""Connectors for the external classification and research services."""

from .keys import KeyPool, KeySelector, RandomKeySelector, RoundRobinKeySelector, make_selector
from .exa import ClassificationClient, extract_links
from .deep_search import DeepResearchClient, extract_research_text

__all__ = [
    "KeyPool",
    "KeySelector",
    "RandomKeySelector",
    "RoundRobinKeySelector",
    "make_selector",
    "ClassificationClient",
    "extract_links",
    "DeepResearchClient",
    "extract_research_text",
]
