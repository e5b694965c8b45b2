"""Long-form investor research connector."""

import json
import logging
from typing import Any, Callable, Optional

import httpx

from app.config import settings
from app.errors import ConfigError, ExternalServiceError

logger = logging.getLogger(__name__)

RESEARCH_PROMPT_TEMPLATE = """Act as a research analyst.

Create a full investor profile for {clean_name} ({investor_type}) including:
Background and career/professional/business history
Contact details, including verified emails, LinkedIn url, twitter url
Current fund or firm and role and hq state, hq country
Investment stage and check size min and max, fund size, and lead investor or follow-on investor
Industry and technology focus
Geographic preference and investment geographies
Notable investments and exits in format [name](url)
Recent deals or activity
Public quotes, essays, or interviews that reveal investment philosophy
What this investor looks for in founders
Red flags or common reasons they pass
Best way to approach or pitch them
Recent exclusive articles, podcasts, videos with links

Use structured sections and keep the analysis concise but thorough.
For each section, give links for citations to ensure 100% correct information
Give a high-quality answer."""

LITERAL_RESPONSE_KEY = "The response text from deep research is..."


def build_research_prompt(clean_name: Optional[str], investor_types: Optional[list[str]]) -> str:
    return RESEARCH_PROMPT_TEMPLATE.format(
        clean_name=clean_name or "",
        investor_type=", ".join(investor_types or []),
    )


# Response text extractors, tried in order; first non-empty string wins.

def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = value if isinstance(value, str) else json.dumps(value)
    return text if text.strip() else None


def _whole_response(data: Any) -> Optional[str]:
    return data if isinstance(data, str) and data.strip() else None


def _data_field(data: Any) -> Optional[str]:
    if isinstance(data, dict) and data.get("data"):
        return _as_text(data["data"])
    return None


def _literal_key(data: Any) -> Optional[str]:
    if isinstance(data, dict) and data.get(LITERAL_RESPONSE_KEY):
        return str(data[LITERAL_RESPONSE_KEY]).strip() or None
    return None


def _text_like_key(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    for key, value in data.items():
        lowered = key.lower()
        if "response" in lowered or "text" in lowered or "content" in lowered:
            return _as_text(value) if value else None
    return None


def _result_or_output(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    for key in ("result", "output"):
        if data.get(key):
            return _as_text(data[key])
    return None


TEXT_EXTRACTORS: list[Callable[[Any], Optional[str]]] = [
    _whole_response,
    _data_field,
    _literal_key,
    _text_like_key,
    _result_or_output,
]


def extract_research_text(data: Any) -> Optional[str]:
    """Pull the research answer out of a loosely-shaped response."""
    for extractor in TEXT_EXTRACTORS:
        text = extractor(data)
        if text:
            return text
    return None


class DeepResearchClient:
    """Ask the research service for a full investor profile."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url if url is not None else settings.deep_search_url
        self.api_key = api_key if api_key is not None else settings.deep_search_api_key
        self.timeout = timeout or settings.request_timeout
        self.transport = transport

    async def research(self, clean_name: Optional[str], investor_types: Optional[list[str]]) -> str:
        """Return the free-text research profile for an investor."""
        if not self.url:
            raise ConfigError("DEEP_SEARCH_URL not configured")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        prompt = build_research_prompt(clean_name, investor_types)
        logger.info(f"Requesting deep research for {clean_name}")

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=settings.connect_timeout),
                transport=self.transport,
            ) as client:
                response = await client.post(self.url, headers=headers, json={"input": prompt})
        except httpx.HTTPError as e:
            logger.warning(f"Deep search request failed for {clean_name}: {e}")
            raise ExternalServiceError("Deep search API failed", details=str(e)) from e

        if not response.is_success:
            logger.error(f"Deep search error: {response.status_code} {response.text[:200]}")
            raise ExternalServiceError(
                "Deep search API failed",
                upstream_status=response.status_code,
                details=response.text,
            )

        try:
            data = response.json()
        except ValueError:
            data = response.text

        text = extract_research_text(data)
        if not text:
            logger.error(f"Could not extract deep research text from: {str(data)[:200]}")
            raise ExternalServiceError("Invalid deep search response format", details=data)

        logger.info(f"Deep research for {clean_name}: {len(text)} chars")
        return text
