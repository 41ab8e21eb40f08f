"""Shared Pydantic data models for spokensite."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# --- Enums ---


class AuditEventType(str, Enum):
    WEBHOOK_AUTH_FAILURE = "webhook_auth_failure"
    WEBHOOK_UNVERIFIED = "webhook_unverified"
    WEBHOOK_DUPLICATE = "webhook_duplicate"
    GENERATION_SUCCESS = "generation_success"
    GENERATION_FAILURE = "generation_failure"
    STORAGE_FAILURE = "storage_failure"


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Generation Models ---


class GenerationResult(BaseModel):
    """Business attributes plus the three site variants, as produced by the model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    business_info: dict[str, Any] = Field(alias="businessInfo")
    modern: str = Field(min_length=1)
    classic: str = Field(min_length=1)
    warm: str = Field(min_length=1)

    def websites(self) -> dict[str, str]:
        return {"modern": self.modern, "classic": self.classic, "warm": self.warm}


# --- Audit Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    session_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "blocked"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
