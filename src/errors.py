"""Error taxonomy for the generation service.

Every failure a request handler can map to an HTTP response derives from
SpokenSiteError and carries the status code it maps to.
"""

from __future__ import annotations


class SpokenSiteError(Exception):
    """Base class for all handled service errors."""

    status_code = 500


class ConfigurationError(SpokenSiteError):
    """Raised when a required credential or setting is missing."""


class AuthenticationError(SpokenSiteError):
    """Raised when a webhook signature is present but does not verify."""

    status_code = 401


class ValidationError(SpokenSiteError):
    """Raised when no transcript can be derived from a request."""

    status_code = 400


class UpstreamError(SpokenSiteError):
    """Raised when the generation API is unreachable or answers non-2xx."""

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        if status is None:
            message = f"OpenRouter API unreachable: {body}"
        else:
            message = f"OpenRouter API error: {status} - {body}"
        super().__init__(message)


class GenerationFormatError(SpokenSiteError):
    """Raised when the generation API answered but its content is unusable."""

    def __init__(self, reason: str, raw: str = "") -> None:
        self.reason = reason
        self.raw = raw
        super().__init__(f"Malformed generation output: {reason}")


class StorageError(SpokenSiteError):
    """Raised when a persistence backend rejects or fails a write."""
