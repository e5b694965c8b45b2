"""Extraction schema for the structured investor profile.

The schema is plain data: a list of ``SchemaField`` entries with a kind,
optional allowed values and an optional normalization hint. ``render()`` is
the only place that turns it into prompt text, and the coercion step reads
the same kinds to validate what comes back.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional


ROLES = [
    "CEO / Founder",
    "Partner",
    "Managing Partner",
    "General Partner",
    "Principal",
    "Venture Partner",
    "Operating Partner",
    "Independent Investor / Angel",
    "Associate",
    "Research Analyst",
    "Scout",
]

INVESTMENT_STAGES = [
    "pre-seed", "seed", "post-seed", "series-a", "series-b", "series-c",
    "growth", "late-stage", "pre-ipo", "public-equity", "angel",
]

INVESTMENT_INDUSTRIES = [
    "artificial-intelligence", "machine-learning", "healthtech", "biotech",
    "digital-health", "mental-health", "wellness", "longevity", "fitness",
    "consumer-health", "medtech", "pharma", "genomics", "bioinformatics",
    "neuroscience", "consumer-tech", "enterprise-software", "saas",
    "vertical-saas", "developer-tools", "productivity", "collaboration",
    "fintech", "payments", "lending", "credit", "insurtech", "regtech",
    "wealthtech", "climate-tech", "energy", "clean-energy", "carbon-removal",
    "sustainability", "web3", "blockchain", "crypto", "defi", "nft",
    "social-platforms", "marketplaces", "creator-economy", "edtech", "hr-tech",
    "future-of-work", "mobility", "transportation", "autonomous-vehicles",
    "robotics", "hardware", "deep-tech", "semiconductors", "data-infrastructure",
    "cloud-infrastructure", "devops", "cybersecurity", "security", "privacy",
    "identity", "digital-identity", "consumer-internet", "ecommerce",
    "retail-tech", "proptech", "real-estate", "construction-tech",
    "smart-cities", "supply-chain", "logistics", "manufacturing",
    "industrial-tech", "agtech", "foodtech", "gaming", "esports", "media",
    "entertainment", "music-tech", "sports-tech", "travel-tech", "hospitality",
    "martech", "adtech", "legal-tech", "govtech", "defense-tech", "space-tech",
    "aerospace", "iot", "edge-computing", "network-effects",
]

ISO_3166_2_HINT = "as per ISO 3166-2 standard"

# Placeholder shown in the JSON template for each kind
_PLACEHOLDERS: dict[str, Any] = {
    "string": "",
    "boolean": True,
    "number": None,
    "string[]": [],
}


@dataclass(frozen=True)
class SchemaField:
    """One field the extraction must fill."""

    name: str
    kind: str  # string | boolean | number | string[]
    allowed_values: Optional[list[str]] = None
    hint: Optional[str] = None

    def __post_init__(self):
        if self.kind not in _PLACEHOLDERS:
            raise ValueError(f"Unknown schema field kind: {self.kind}")

    def describe(self) -> Optional[str]:
        """Normalization line for the prompt, if this field has one."""
        if self.allowed_values:
            choices = ",".join(f'"{v}"' for v in self.allowed_values)
            return f"{self.name}: pick from {choices}"
        if self.hint:
            return f"{self.name}: {self.hint}"
        return None


@dataclass
class ExtractionSchema:
    """Ordered set of fields for one extraction call."""

    fields: list[SchemaField] = field(default_factory=list)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get(self, name: str) -> Optional[SchemaField]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def template(self) -> dict[str, Any]:
        """Empty JSON object showing the expected shape."""
        return {f.name: _PLACEHOLDERS[f.kind] for f in self.fields}

    def render(self) -> str:
        """Serialize to the text block embedded in the extraction prompt."""
        lines = [json.dumps(self.template(), indent=2), ""]
        lines.extend(d for d in (f.describe() for f in self.fields) if d)
        return "\n".join(lines)


def build_extraction_schema(is_person: bool) -> ExtractionSchema:
    """Build the profile schema; ``role`` is only asked for people."""
    fields = [
        SchemaField("linkedin_url", "string"),
        SchemaField("twitter_url", "string"),
        SchemaField("emails", "string[]"),
    ]
    if is_person:
        fields.append(SchemaField("role", "string", allowed_values=ROLES))
    fields.extend([
        SchemaField("hq_state", "string", hint=ISO_3166_2_HINT),
        SchemaField("hq_country", "string", hint=ISO_3166_2_HINT),
        SchemaField("leads_round", "boolean"),
        SchemaField("active", "boolean"),
        SchemaField("fund_size_usd", "number"),
        SchemaField("check_size_min_usd", "number"),
        SchemaField("check_size_max_usd", "number"),
        SchemaField("investment_stages", "string[]", allowed_values=INVESTMENT_STAGES),
        SchemaField("investment_industries", "string[]", allowed_values=INVESTMENT_INDUSTRIES),
        SchemaField("investment_geographies", "string[]", hint=ISO_3166_2_HINT),
        SchemaField(
            "investment_thesis",
            "string",
            hint="Precise criteria to qualify, starts with Invests in....",
        ),
        SchemaField(
            "notable_investments",
            "string[]",
            hint="list of strings in format [name](url)",
        ),
    ])
    return ExtractionSchema(fields=fields)
