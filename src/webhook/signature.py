"""HMAC-SHA256 verification of voice-platform webhook bodies.

Two header formats are understood:

- ``sha256=<hex>`` or a bare ``<hex>``: HMAC of the raw body.
- ``t=<unix seconds>,v0=<hex>``: HMAC of ``"<t>.<raw body>"``, with the
  timestamp bounded by a tolerance window.

All digest comparisons go through hmac.compare_digest.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from collections.abc import Callable, Mapping
from enum import Enum

logger = logging.getLogger(__name__)

# Header names seen across platform versions, checked in this order.
SIGNATURE_HEADERS = (
    "elevenlabs-signature",
    "x-elevenlabs-signature",
    "x-signature",
    "x-hub-signature-256",
)

_SCHEME_PREFIX = "sha256="
_DEFAULT_TOLERANCE_SECONDS = 30 * 60


class SignatureStatus(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    UNVERIFIABLE = "unverifiable"


def find_signature(headers: Mapping[str, str]) -> str | None:
    """Return the first non-empty signature header value, if any."""
    lowered = {k.lower(): v for k, v in headers.items()}
    for name in SIGNATURE_HEADERS:
        value = lowered.get(name, "").strip()
        if value:
            return value
    return None


class SignatureVerifier:
    """Decides whether a webhook request body came from the trusted platform."""

    def __init__(
        self,
        secret: str | None,
        tolerance_seconds: int = _DEFAULT_TOLERANCE_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret.encode() if secret else None
        self._tolerance_seconds = tolerance_seconds
        self._clock = clock
        if self._secret is None:
            logger.warning(
                "ELEVENLABS_WEBHOOK_SECRET is not configured; "
                "webhook signatures cannot be verified",
            )

    @property
    def configured(self) -> bool:
        return self._secret is not None

    def verify(self, headers: Mapping[str, str], body: bytes) -> SignatureStatus:
        """Check the signature header against the exact raw body bytes."""
        signature = find_signature(headers)
        if signature is None or self._secret is None:
            return SignatureStatus.UNVERIFIABLE

        if "v0=" in signature and "t=" in signature:
            return self._verify_timestamped(signature, body)

        if signature.lower().startswith(_SCHEME_PREFIX):
            signature = signature[len(_SCHEME_PREFIX):]
        expected = hmac.new(self._secret, body, hashlib.sha256).hexdigest()
        return self._compare(signature, expected)

    def _verify_timestamped(self, signature: str, body: bytes) -> SignatureStatus:
        fields: dict[str, str] = {}
        for part in signature.split(","):
            key, _, value = part.strip().partition("=")
            fields[key] = value

        try:
            timestamp = int(fields.get("t", ""))
        except ValueError:
            return SignatureStatus.INVALID
        if abs(self._clock() - timestamp) > self._tolerance_seconds:
            logger.warning("Webhook signature timestamp outside tolerance window")
            return SignatureStatus.INVALID

        signed = f"{timestamp}.".encode() + body
        expected = hmac.new(self._secret, signed, hashlib.sha256).hexdigest()  # type: ignore[arg-type]
        return self._compare(fields.get("v0", ""), expected)

    @staticmethod
    def _compare(provided: str, expected: str) -> SignatureStatus:
        if hmac.compare_digest(provided.strip().lower().encode(), expected.encode()):
            return SignatureStatus.VALID
        return SignatureStatus.INVALID
