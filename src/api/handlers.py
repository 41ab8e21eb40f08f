"""Request pipelines for direct submissions and voice-platform webhooks.

Direct submission stages:
1. Body size check
2. JSON decode and transcript validation
3. Generation
4. Best-effort persistence

Webhook stages:
1. Body size check
2. Signature verification (before anything else touches the body)
3. Transcript extraction (acknowledge without generating if none)
4. Replay guard on the conversation id
5. Generation
6. Best-effort persistence

Every handled error is translated to a status code and JSON envelope here
and nowhere else.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from src.config import AppConfig, UnverifiedPolicy
from src.errors import AuthenticationError, SpokenSiteError, StorageError, ValidationError
from src.models import AuditEvent, AuditEventType, GenerationResult, RiskLevel
from src.webhook.extractor import extract_transcript
from src.webhook.signature import SignatureStatus, SignatureVerifier

if TYPE_CHECKING:
    from src.audit.logger import AuditLogger
    from src.generation.client import GenerationClient
    from src.storage.base import SiteStore
    from src.webhook.replay_protection import ConversationReplayGuard

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_SUFFIX_LENGTH = 9


def new_session_id(prefix: str = "site") -> str:
    """``<prefix>_<epoch millis>_<9 random lowercase alphanumerics>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_SUFFIX_LENGTH))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


@dataclass
class HandlerResponse:
    """JSON body and status to send back to the caller."""

    body: dict[str, Any]
    status_code: int = 200


def _decode_object(body: bytes) -> dict[str, Any] | None:
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError):
        return None
    return payload if isinstance(payload, dict) else None


class _Pipeline:
    error_label = "Failed to process"

    def __init__(
        self,
        config: AppConfig,
        generator: GenerationClient,
        store: SiteStore | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._config = config
        self._generator = generator
        self._store = store
        self._audit_logger = audit_logger

    def _too_large(self, body: bytes) -> HandlerResponse | None:
        if len(body) > self._config.max_body_bytes:
            return HandlerResponse({"error": "Request body too large"}, status_code=413)
        return None

    async def _persist(
        self,
        session_id: str,
        result: GenerationResult,
        conversation_id: str | None = None,
    ) -> bool:
        """Store the result; False means the caller must return it inline."""
        if self._store is None:
            logger.info("No site store configured, returning %s inline", session_id)
            return False
        try:
            await self._store.save(session_id, result, conversation_id)
        except Exception as exc:
            if isinstance(exc, StorageError):
                logger.warning("Storage unavailable for %s, returning inline: %s", session_id, exc)
            else:
                logger.exception("Unexpected storage failure for %s, returning inline", session_id)
            self._audit(
                AuditEventType.STORAGE_FAILURE, "persist", "failure", RiskLevel.MEDIUM,
                session_id=session_id, details={"backend": self._store.name, "error": str(exc)},
            )
            return False
        logger.info("Saved %s to %s", session_id, self._store.name)
        return True

    def _error_response(self, exc: Exception, session_id: str | None = None) -> HandlerResponse:
        if isinstance(exc, (AuthenticationError, ValidationError)):
            return HandlerResponse({"error": str(exc)}, status_code=exc.status_code)

        if isinstance(exc, SpokenSiteError):
            logger.error("%s (%s): %s", self.error_label, type(exc).__name__, exc)
            status_code = exc.status_code
        else:
            logger.exception("%s: unexpected error", self.error_label)
            status_code = 500

        self._audit(
            AuditEventType.GENERATION_FAILURE, "generate", "failure", RiskLevel.MEDIUM,
            session_id=session_id, details={"error_type": type(exc).__name__},
        )
        return HandlerResponse(
            {"error": self.error_label, "details": str(exc) or type(exc).__name__},
            status_code=status_code,
        )

    def _audit(
        self,
        event_type: AuditEventType,
        action: str,
        result: str,
        risk_level: RiskLevel,
        session_id: str | None = None,
        source_ip: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit_logger is None:
            return
        self._audit_logger.log(AuditEvent(
            event_type=event_type,
            action=action,
            result=result,
            risk_level=risk_level,
            session_id=session_id,
            source_ip=source_ip,
            details=details,
        ))


class GeneratePipeline(_Pipeline):
    """Direct transcript submission."""

    error_label = "Failed to generate websites"

    async def handle(self, body: bytes) -> HandlerResponse:
        rejected = self._too_large(body)
        if rejected is not None:
            return rejected

        session_id: str | None = None
        try:
            payload = _decode_object(body)
            if payload is None:
                raise ValidationError("Invalid JSON body")
            transcript = payload.get("transcript")
            if not isinstance(transcript, str) or not transcript.strip():
                raise ValidationError("No transcript provided")
            business_name = payload.get("businessName")
            if not isinstance(business_name, str) or not business_name.strip():
                business_name = None

            session_id = new_session_id("site")
            result = await self._generator.generate(transcript, business_name)
        except Exception as exc:
            return self._error_response(exc, session_id)

        self._audit(
            AuditEventType.GENERATION_SUCCESS, "generate", "success", RiskLevel.INFO,
            session_id=session_id,
        )
        await self._persist(session_id, result)

        return HandlerResponse({
            "success": True,
            "sessionId": session_id,
            "businessInfo": result.business_info,
            "previewUrl": self._config.preview_url(session_id),
            "websites": result.websites(),
        })


class WebhookPipeline(_Pipeline):
    """Voice-platform post-conversation callback."""

    def __init__(
        self,
        config: AppConfig,
        generator: GenerationClient,
        verifier: SignatureVerifier,
        store: SiteStore | None = None,
        replay_guard: ConversationReplayGuard | None = None,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        super().__init__(config, generator, store=store, audit_logger=audit_logger)
        self._verifier = verifier
        self._replay_guard = replay_guard

    async def handle(
        self,
        headers: Mapping[str, str],
        body: bytes,
        source_ip: str | None = None,
    ) -> HandlerResponse:
        rejected = self._too_large(body)
        if rejected is not None:
            return rejected

        try:
            self._authenticate(headers, body, source_ip)
        except AuthenticationError as exc:
            return self._error_response(exc)

        conversation_id: str | None = None
        session_id: str | None = None
        claimed = False
        try:
            payload = _decode_object(body)
            if payload is None:
                logger.info("Webhook body is not a JSON object, acknowledging")
                return self._acknowledge("Payload is not a JSON object", [])

            extracted = extract_transcript(payload)
            if extracted is None:
                logger.info("Webhook carried no transcript, keys: %s", list(payload))
                return self._acknowledge("No transcript found", list(payload))
            logger.info(
                "Transcript found in %s, length: %d", extracted.source.value, len(extracted.text),
            )

            raw_id = payload.get("conversation_id")
            conversation_id = raw_id if isinstance(raw_id, str) and raw_id.strip() else None
            session_id = conversation_id or new_session_id("session")

            if self._replay_guard is not None and conversation_id is not None:
                if not self._replay_guard.claim(conversation_id):
                    logger.info("Conversation %s already processed, skipping", conversation_id)
                    self._audit(
                        AuditEventType.WEBHOOK_DUPLICATE, "webhook", "blocked", RiskLevel.LOW,
                        session_id=session_id, source_ip=source_ip,
                    )
                    return HandlerResponse({
                        "received": True,
                        "duplicate": True,
                        "sessionId": session_id,
                        "message": "Conversation already processed",
                    })
                claimed = True

            result = await self._generator.generate(extracted.text)
        except Exception as exc:
            if claimed:
                self._release_claim(conversation_id)
            return self._error_response(exc, session_id)

        self._audit(
            AuditEventType.GENERATION_SUCCESS, "webhook", "success", RiskLevel.INFO,
            session_id=session_id, source_ip=source_ip,
            details={"transcript_source": extracted.source.value},
        )
        stored = await self._persist(session_id, result, conversation_id)

        response: dict[str, Any] = {
            "success": True,
            "sessionId": session_id,
            "message": "Websites generated and saved" if stored else "Websites generated",
            "businessInfo": result.business_info,
            "previewUrl": self._config.preview_url(session_id),
        }
        if not stored:
            response["websites"] = result.websites()
        return HandlerResponse(response)

    def _release_claim(self, conversation_id: str | None) -> None:
        if self._replay_guard is None or conversation_id is None:
            return
        try:
            self._replay_guard.release(conversation_id)
        except Exception:
            logger.exception("Could not release claim on conversation %s", conversation_id)

    def _authenticate(
        self, headers: Mapping[str, str], body: bytes, source_ip: str | None,
    ) -> None:
        status = self._verifier.verify(headers, body)
        if status is SignatureStatus.VALID:
            return

        if status is SignatureStatus.INVALID:
            logger.warning("Rejected webhook with invalid signature from %s", source_ip)
            self._audit(
                AuditEventType.WEBHOOK_AUTH_FAILURE, "webhook", "failure", RiskLevel.HIGH,
                source_ip=source_ip, details={"reason": "invalid_signature"},
            )
            raise AuthenticationError("Invalid signature")

        if self._config.unverified_policy is UnverifiedPolicy.REJECT:
            logger.warning("Rejected unverifiable webhook from %s", source_ip)
            self._audit(
                AuditEventType.WEBHOOK_AUTH_FAILURE, "webhook", "failure", RiskLevel.HIGH,
                source_ip=source_ip, details={"reason": "unverifiable"},
            )
            raise AuthenticationError("Missing signature")

        logger.warning("Accepting unverified webhook from %s", source_ip)
        self._audit(
            AuditEventType.WEBHOOK_UNVERIFIED, "webhook", "success", RiskLevel.MEDIUM,
            source_ip=source_ip,
            details={"secret_configured": self._verifier.configured},
        )

    @staticmethod
    def _acknowledge(message: str, payload_keys: list[str]) -> HandlerResponse:
        return HandlerResponse({
            "received": True,
            "message": message,
            "payload_keys": payload_keys,
        })
