"""Defensive projection of extraction output onto investor record fields."""

import logging
import math
from typing import Any, Optional

from app.models import ClassificationSummary
from .schema import ExtractionSchema, SchemaField

logger = logging.getLogger(__name__)

# Extraction fields written to a column of the same name
PROFILE_COLUMNS = [
    "twitter_url",
    "active",
    "hq_state",
    "hq_country",
    "fund_size_usd",
    "check_size_min_usd",
    "check_size_max_usd",
    "investment_stages",
    "investment_industries",
    "investment_geographies",
    "investment_thesis",
    "notable_investments",
    "leads_round",
]


def coerce_value(schema_field: SchemaField, value: Any) -> Any:
    """Return ``value`` if it matches the field kind, else None."""
    kind = schema_field.kind
    if kind == "number":
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        # Stored in a Float column; ints past float range are malformed too
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if kind == "boolean":
        return value if isinstance(value, bool) else None
    if kind == "string":
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None
    if kind == "string[]":
        if not isinstance(value, list):
            return None
        return [v for v in value if isinstance(v, str) and v.strip()]
    return None


def join_emails(value: Any) -> Optional[str]:
    """Comma-join an email array; anything else becomes None."""
    if not isinstance(value, list):
        return None
    emails = [e.strip() for e in value if isinstance(e, str) and e.strip()]
    return ", ".join(emails) or None


def build_profile_update(
    extracted: dict,
    schema: ExtractionSchema,
    summary: ClassificationSummary,
    deep_research: str,
) -> dict[str, Any]:
    """Build the final record update from an extraction result.

    Every field is checked on its own; a malformed value only nulls that
    field. ``role`` is written for people only, and ``investor_type`` keeps
    the classification list unless the extraction returned an array.
    """
    update: dict[str, Any] = {}

    for name in PROFILE_COLUMNS:
        schema_field = schema.get(name)
        if schema_field is None:
            continue
        raw = extracted.get(name)
        update[name] = coerce_value(schema_field, raw)
        if raw is not None and update[name] is None:
            logger.debug(f"Dropped malformed {name}: {raw!r}")

    update["email"] = join_emails(extracted.get("emails"))

    role_field = schema.get("role")
    if summary.is_person and role_field is not None:
        update["role"] = coerce_value(role_field, extracted.get("role"))

    investor_type = extracted.get("investor_type")
    if isinstance(investor_type, list):
        update["investor_type"] = investor_type
    else:
        update["investor_type"] = summary.investor_types

    update["deep_research"] = deep_research
    return update
