"""Tests for shared data models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from src.models import AuditEvent, AuditEventType, GenerationResult, RiskLevel
from tests.conftest import make_result_payload


class TestGenerationResult:
    def test_accepts_model_field_names(self) -> None:
        result = GenerationResult.model_validate(make_result_payload())
        assert result.business_info["industry"] == "Plumbing"

    def test_websites_mapping(self) -> None:
        result = GenerationResult.model_validate(make_result_payload())
        assert list(result.websites()) == ["modern", "classic", "warm"]

    def test_serializes_with_model_field_names(self) -> None:
        result = GenerationResult.model_validate(make_result_payload())
        data = json.loads(result.model_dump_json(by_alias=True))
        assert set(data) == {"businessInfo", "modern", "classic", "warm"}

    def test_missing_variant_rejected(self) -> None:
        payload = make_result_payload()
        del payload["modern"]
        with pytest.raises(ValidationError):
            GenerationResult.model_validate(payload)

    def test_frozen(self) -> None:
        result = GenerationResult.model_validate(make_result_payload())
        with pytest.raises(ValidationError):
            result.modern = "<html></html>"  # type: ignore[misc]


def test_audit_event_timestamp_defaults() -> None:
    event = AuditEvent(
        event_type=AuditEventType.WEBHOOK_DUPLICATE,
        action="webhook",
        result="blocked",
        risk_level=RiskLevel.LOW,
    )
    assert event.timestamp
    assert event.details is None
