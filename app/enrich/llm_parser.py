"""Structured profile extraction using Claude API."""

import asyncio
import json
import logging
from typing import Optional

from app.config import settings
from app.errors import ConfigError
from .schema import ExtractionSchema

logger = logging.getLogger(__name__)


class ExtractionClient:
    """Convert deep-research text into a typed JSON profile."""

    SYSTEM_MESSAGE = """Convert the following investor profile into a structured JSON object using the schema below.

Rules:
Use null if a field cannot be confidently inferred.
Use arrays where specified.
Normalize values where possible.
Do not invent data.
Dates should be in ISO format when available.
If multiple values apply, include all of them.
Use accurate text.
Output valid JSON only"""

    USER_TEMPLATE = "Analyze the investment profile.\n\n{schema}\n\nInput text:\n<<<<{text}>>>>"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.llm_model
        self.max_tokens = max_tokens or settings.extraction_max_tokens
        self._client = None

    @property
    def client(self):
        """Lazy-load Anthropic client."""
        if self._client is None:
            if not self.api_key:
                raise ConfigError("ANTHROPIC_API_KEY not configured")
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    async def extract(self, schema: ExtractionSchema, deep_research: str) -> dict:
        """Extract a profile matching ``schema`` from the research text.

        Returns the decoded JSON object, or ``{"error": ...}`` when the
        completion fails; the caller decides what an error means.
        """
        user_message = self.USER_TEMPLATE.format(schema=schema.render(), text=deep_research)
        return await self.complete_json(self.SYSTEM_MESSAGE, user_message)

    async def complete_json(self, system: str, user: str) -> dict:
        """Run a JSON-only completion in a worker thread."""
        # Resolve the client here so a missing key surfaces as ConfigError
        client = self.client
        return await asyncio.to_thread(self._call_api, client, system, user)

    def _call_api(self, client, system: str, user: str) -> dict:
        """Call Claude API synchronously."""
        import anthropic

        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system,
                messages=[
                    {"role": "user", "content": user}
                ],
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API call failed: {e}")
            return {"error": str(e)}

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        return parse_json_object(text)


def parse_json_object(text: str) -> dict:
    """Decode a JSON object, tolerating markdown code fences."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        text = text.split("```")[1].split("```")[0]

    try:
        data = json.loads(text.strip())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse LLM response as JSON: {e}")
        return {"error": f"Invalid JSON from completion: {e}"}

    if not isinstance(data, dict):
        return {"error": "Completion did not return a JSON object"}
    return data
