"""Identifier normalization for domains and LinkedIn paths."""

import logging
import re
from typing import Any
from urllib.parse import urlparse

from app.models import CanonicalIdentifier, IdentifierKind

logger = logging.getLogger(__name__)

LINKEDIN_URL_RE = re.compile(r"linkedin\.com/(company|in)/[\w.-]+", re.I)
LINKEDIN_PATH_RE = re.compile(r"^(in|company)/[\w.-]+$", re.I)


class IdentifierNormalizer:
    """Turn free-form input into a canonical domain or LinkedIn path."""

    def normalize(self, raw: Any) -> CanonicalIdentifier:
        """Normalize a bare domain, URL, or LinkedIn URL/path.

        Empty or non-string input yields an empty domain-kind identifier;
        callers treat that as bad input rather than an exception.
        """
        if not isinstance(raw, str) or not raw.strip():
            return CanonicalIdentifier(kind=IdentifierKind.DOMAIN, value="")

        text = raw.strip()
        if self.is_linkedin(text):
            return CanonicalIdentifier(
                kind=IdentifierKind.LINKEDIN,
                value=self.normalize_linkedin(text),
            )
        return CanonicalIdentifier(
            kind=IdentifierKind.DOMAIN,
            value=self.normalize_domain(text),
        )

    @staticmethod
    def is_linkedin(text: str) -> bool:
        return bool(
            LINKEDIN_URL_RE.search(text)
            or "linkedin.com" in text.lower()
            or LINKEDIN_PATH_RE.match(text)
        )

    @staticmethod
    def normalize_linkedin(text: str) -> str:
        """Reduce a LinkedIn URL to its path, e.g. ``in/jane-doe``."""
        if LINKEDIN_PATH_RE.match(text):
            return text

        url = text if text.lower().startswith("http") else f"https://{text}"
        try:
            return urlparse(url).path.strip("/")
        except ValueError as e:
            logger.debug(f"URL parse failed for {text!r}: {e}")
            path = re.sub(r"^https?://[^/]+", "", text, flags=re.I).strip("/")
            return path or text

    @staticmethod
    def normalize_domain(text: str) -> str:
        """Reduce a URL or bare domain to a host without ``www.``."""
        url = text if text.lower().startswith("http") else f"https://{text}"
        try:
            hostname = urlparse(url).hostname
        except ValueError as e:
            logger.debug(f"URL parse failed for {text!r}: {e}")
            hostname = None

        if hostname:
            return re.sub(r"^www\.", "", hostname)

        # Fallback: plain string manipulation
        domain = re.sub(r"^https?://", "", text.lower())
        domain = re.sub(r"^www\.", "", domain)
        return domain.split("/")[0]
