"""Shared test fixtures for spokensite."""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.audit.logger import AuditLogger
from src.config import AppConfig
from src.models import GenerationResult

WEBHOOK_SECRET = "whsec_test_secret"

MODERN_HTML = "<!DOCTYPE html><html><body class=\"modern\">Rapid Plumbing</body></html>"
CLASSIC_HTML = "<!DOCTYPE html><html><body class=\"classic\">Rapid Plumbing</body></html>"
WARM_HTML = "<!DOCTYPE html><html><body class=\"warm\">Rapid Plumbing</body></html>"


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)


# --- Factory functions for test data ---


def make_config(**kwargs: Any) -> AppConfig:
    """Factory for AppConfig with a test API key and webhook secret."""
    defaults: dict[str, Any] = {
        "openrouter_api_key": "sk-or-test",
        "webhook_secret": WEBHOOK_SECRET,
    }
    defaults.update(kwargs)
    return AppConfig(**defaults)


def make_result_payload(**kwargs: Any) -> dict[str, Any]:
    """The JSON object the model is asked to return."""
    defaults: dict[str, Any] = {
        "businessInfo": {
            "name": "Rapid Plumbing",
            "industry": "Plumbing",
            "services": ["Leak repair", "Water heaters"],
            "location": "Austin, TX",
        },
        "modern": MODERN_HTML,
        "classic": CLASSIC_HTML,
        "warm": WARM_HTML,
    }
    defaults.update(kwargs)
    return defaults


def make_generation_result(**kwargs: Any) -> GenerationResult:
    return GenerationResult.model_validate(make_result_payload(**kwargs))


def make_generator(result: GenerationResult | None = None) -> AsyncMock:
    """AsyncMock standing in for GenerationClient."""
    generator = AsyncMock()
    generator.generate.return_value = result or make_generation_result()
    return generator


def completion_envelope(content: str) -> dict[str, Any]:
    """Chat-completion response body wrapping ``content``."""
    return {
        "id": "gen-123",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


def sign_body(secret: str, body: bytes, prefix: str = "sha256=") -> str:
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{prefix}{digest}"


def json_body(payload: Any) -> bytes:
    return json.dumps(payload).encode()
