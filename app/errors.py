"""Error taxonomy for the investor research pipeline.

Every error raised by a pipeline stage derives from ``PipelineError`` and
knows the HTTP status it maps to, so the API layer can return it without
inspecting the stage that failed.
"""

from typing import Any, Optional


class PipelineError(Exception):
    """Base class for errors that abort a pipeline run."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_response(self) -> dict:
        body: dict = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InputError(PipelineError):
    """Missing or unparseable identifier."""

    status_code = 400


class ConfigError(PipelineError):
    """Missing API keys or store credentials."""

    status_code = 500


class ExternalServiceError(PipelineError):
    """Non-2xx or unusable response from an upstream service.

    Upstream 5xx (or no upstream status at all, e.g. a timeout or an empty
    body) maps to 502; any other upstream status maps to 400.
    """

    def __init__(
        self,
        message: str,
        upstream_status: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.upstream_status is None or self.upstream_status >= 500:
            return 502
        return 400


class ExtractionError(PipelineError):
    """The completion service reported an in-band error."""

    status_code = 500


class PersistenceError(PipelineError):
    """A store write failed."""

    status_code = 500
