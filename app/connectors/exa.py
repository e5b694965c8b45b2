"""Exa contents API connector for investor classification."""

import json
import logging
from typing import Any, Optional

import httpx

from app.config import settings
from app.errors import ExternalServiceError
from app.models import INVESTOR_TYPES, CanonicalIdentifier, ClassificationResult, ClassificationSummary
from .keys import KeyPool, make_selector

logger = logging.getLogger(__name__)

SUBPAGE_TARGETS = ["about", "portfolio", "team", "contact", "thesis", "investments", "apply link"]

CLASSIFICATION_QUERY = """You are analyzing a website to determine whether it represents an investor.

Your task:
1. Determine whether the subject is a Person or an Organization.
2. Determine whether the subject is an investor.
3. If an investor, assign one or more investor types.
4. Extract a clean, normalized name.

Definitions:
- A Person is an individual acting under their own name.
- An Organization is a company, fund, firm, or structured entity.
- An investor may have multiple investor types.
- If the subject does not clearly invest capital, mark it as Not an Investor.

Investor types may include:
""" + "\n".join(f"- {t}" for t in INVESTOR_TYPES) + """

Rules:
- Base decisions only on visible website content.
- Do not infer or assume.
- A person can be an investor.
- An organization can have multiple investor types.
- If no investment activity is clearly stated, classify as Not an Investor.
- The clean_name should remove legal suffixes, fund numbers, and marketing terms.

Return the result strictly in the JSON format defined below."""

CLASSIFICATION_SCHEMA = {
    "description": (
        "Schema for entities that can be either people or organizations, "
        "with investor classification and normalized naming"
    ),
    "type": "object",
    "properties": {
        "entity_type": {
            "type": "string",
            "enum": ["Person", "Organization"],
            "description": "Type of entity being described",
        },
        "is_investor": {
            "type": "boolean",
            "description": "Whether this entity is an investor",
        },
        "investor_types": {
            "type": "array",
            "items": {"type": "string", "enum": INVESTOR_TYPES},
            "description": "Types of investment activities this entity engages in",
        },
        "clean_name": {
            "type": "string",
            "description": "Normalized name without legal suffixes or branding noise",
        },
    },
    "required": ["entity_type", "is_investor", "investor_types", "clean_name"],
    "additionalProperties": False,
}


def extract_links(subpages: Any) -> list[str]:
    """Format crawled sub-pages as ``[title](url)`` citations.

    The title falls back to the URL, the URL falls back to the page id, and
    entries with neither are skipped.
    """
    links: list[str] = []
    if not isinstance(subpages, list):
        return links

    for page in subpages:
        if not isinstance(page, dict):
            continue
        url = page.get("url") or page.get("id") or ""
        if not url:
            continue
        title = page.get("title") or url
        links.append(f"[{title}]({url})")
    return links


def parse_summary(raw: Any) -> Optional[dict]:
    """Decode the service summary, which may arrive as a JSON string."""
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse classification summary: {e}")
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


class ClassificationClient:
    """Classify a website or LinkedIn profile as investor / non-investor."""

    def __init__(
        self,
        key_pool: KeyPool,
        base_url: Optional[str] = None,
        subpages: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_pool = key_pool
        self.base_url = (base_url or settings.exa_base_url).rstrip("/")
        self.subpages = subpages or settings.exa_subpages
        self.timeout = timeout or settings.request_timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "ClassificationClient":
        pool = KeyPool(settings.exa_key_pool, make_selector(settings.key_selection))
        return cls(pool)

    def build_payload(self, url: str) -> dict:
        return {
            "ids": [url],
            "text": {"verbosity": "compact"},
            "subpages": self.subpages,
            "subpageTarget": SUBPAGE_TARGETS,
            "summary": {
                "query": CLASSIFICATION_QUERY,
                "schema": CLASSIFICATION_SCHEMA,
            },
        }

    async def classify(self, identifier: CanonicalIdentifier) -> ClassificationResult:
        """Crawl the identifier's URL and classify the entity behind it."""
        api_key = self.key_pool.pick()
        url = identifier.to_url()
        logger.info(f"Classifying {url}")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=settings.connect_timeout),
                transport=self.transport,
            ) as client:
                response = await client.post(
                    f"{self.base_url}/contents",
                    headers={"content-type": "application/json", "x-api-key": api_key},
                    json=self.build_payload(url),
                )
        except httpx.HTTPError as e:
            logger.warning(f"Exa request failed for {url}: {e}")
            raise ExternalServiceError("Exa API failed", details=str(e)) from e

        if not response.is_success:
            logger.error(f"Exa API error: {response.status_code} {response.text[:200]}")
            raise ExternalServiceError(
                "Exa API failed",
                upstream_status=response.status_code,
                details=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError("Exa API returned invalid JSON", details=response.text) from e

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            raise ExternalServiceError("No results from Exa API", details={"cleaned": identifier.value})

        first = results[0]
        summary = ClassificationSummary.from_raw(parse_summary(first.get("summary")))
        links = extract_links(first.get("subpages"))
        logger.debug(f"Classification for {url}: {summary.model_dump()} ({len(links)} links)")
        return ClassificationResult(summary=summary, links=links)
