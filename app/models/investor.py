"""Investor research models."""

from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


INVESTOR_TYPES = [
    "Venture Capital",
    "Angel Investor",
    "Family Office",
    "Private Equity",
    "Hedge Fund",
    "Corporate Venture",
    "Accelerator / Incubator",
    "Investment Holding Company",
]


class IdentifierKind(str, Enum):
    DOMAIN = "domain"
    LINKEDIN = "linkedin"


class CanonicalIdentifier(BaseModel):
    """Normalized domain or LinkedIn path used as the lookup key."""

    kind: IdentifierKind = Field(description="Whether the key is a domain or a LinkedIn path")
    value: str = Field(default="", description="Domain without scheme/www, or LinkedIn path")

    @property
    def is_empty(self) -> bool:
        return not self.value

    @property
    def domain(self) -> Optional[str]:
        if self.kind == IdentifierKind.DOMAIN and self.value:
            return self.value
        return None

    @property
    def linkedin_url(self) -> Optional[str]:
        if self.kind == IdentifierKind.LINKEDIN and self.value:
            return self.value
        return None

    def to_url(self) -> str:
        """Render back into a fully-qualified URL for crawling."""
        if self.kind == IdentifierKind.LINKEDIN:
            return f"https://www.linkedin.com/{self.value}"
        return f"https://{self.value}"


class ClassificationSummary(BaseModel):
    """Entity type and investor status decided from crawled content."""

    entity_type: Optional[Literal["Person", "Organization"]] = None
    is_investor: bool = False
    investor_types: Optional[list[str]] = None
    clean_name: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Optional[dict]) -> "ClassificationSummary":
        """Build from the decoded service summary, trusting nothing.

        ``is_investor`` is only true when the flag is true *and* at least one
        investor type was returned.
        """
        if not isinstance(raw, dict):
            return cls()

        entity_type = raw.get("entity_type")
        if entity_type not in ("Person", "Organization"):
            entity_type = None

        types = raw.get("investor_types")
        types = [t for t in types if isinstance(t, str) and t] if isinstance(types, list) else []
        is_investor = raw.get("is_investor") is True and bool(types)

        clean_name = raw.get("clean_name")
        if not isinstance(clean_name, str) or not clean_name.strip():
            clean_name = None

        return cls(
            entity_type=entity_type,
            is_investor=is_investor,
            investor_types=types if is_investor else None,
            clean_name=clean_name.strip() if clean_name else None,
        )

    @property
    def is_person(self) -> bool:
        return self.entity_type == "Person"

    @property
    def record_type(self) -> Optional[str]:
        """Stored ``type`` column: person, firm, or unknown."""
        if self.entity_type == "Person":
            return "person"
        if self.entity_type == "Organization":
            return "firm"
        return None


class ClassificationResult(BaseModel):
    """Classification summary plus the citation links found while crawling."""

    summary: ClassificationSummary
    links: list[str] = Field(default_factory=list)


class OutcomeStatus(str, Enum):
    SKIPPED = "skipped"
    NON_INVESTOR = "non_investor"
    ENRICHED = "enriched"


class ResearchOutcome(BaseModel):
    """Terminal result of one pipeline run."""

    status: OutcomeStatus
    identifier: CanonicalIdentifier
    record_id: Optional[str] = None
    reason: Optional[str] = None
    summary: Optional[ClassificationSummary] = None
    links: list[str] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        """Render the outward JSON body for this outcome."""
        body: dict[str, Any] = {
            "cleaned": self.identifier.value,
            "domain": self.identifier.domain,
            "linkedinUrl": self.identifier.linkedin_url,
        }
        if self.status == OutcomeStatus.SKIPPED:
            return {"skipped": True, "reason": self.reason, **body}

        body["summary"] = self.summary.model_dump() if self.summary else None
        body["links"] = self.links
        if self.status == OutcomeStatus.NON_INVESTOR:
            body["research_status"] = "to_do"
            body["message"] = "Not an investor. Marked as to_do for future processing."
        else:
            body["updated"] = True
            body["deep_research_complete"] = True
        return body
