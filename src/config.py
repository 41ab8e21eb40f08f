"""Process configuration, read once from the environment at startup."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

DEFAULT_MODEL_ID = "anthropic/claude-sonnet-4-20250514"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class UnverifiedPolicy(str, Enum):
    """What to do with a webhook whose signature cannot be checked."""

    REJECT = "reject"
    ACCEPT = "accept"


@dataclass(frozen=True)
class AppConfig:
    openrouter_api_key: str | None = None
    openrouter_model_id: str = DEFAULT_MODEL_ID
    openrouter_base_url: str = DEFAULT_OPENROUTER_BASE_URL
    app_referer: str = "https://spokensite.ai"
    app_title: str = "SpokenSite Website Generator"
    generation_timeout_seconds: float = 60.0
    webhook_secret: str | None = None
    unverified_policy: UnverifiedPolicy = UnverifiedPolicy.REJECT
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    kv_rest_api_url: str | None = None
    kv_rest_api_token: str | None = None
    storage_timeout_seconds: float = 10.0
    preview_base_url: str = ""
    dedup_db_path: str | None = None
    audit_log_path: str | None = None
    max_body_bytes: int = 1024 * 1024
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build the configuration from environment variables.

        Empty values are treated as unset. Raises ValueError for values that
        cannot be parsed, so a bad deployment fails at startup rather than on
        the first request.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        policy_raw = (get("WEBHOOK_UNVERIFIED_POLICY") or "reject").lower()
        try:
            policy = UnverifiedPolicy(policy_raw)
        except ValueError:
            raise ValueError(
                f"WEBHOOK_UNVERIFIED_POLICY must be 'reject' or 'accept', got {policy_raw!r}"
            ) from None

        return cls(
            openrouter_api_key=get("OPENROUTER_API_KEY"),
            openrouter_model_id=get("OPENROUTER_MODEL_ID") or DEFAULT_MODEL_ID,
            openrouter_base_url=get("OPENROUTER_BASE_URL") or DEFAULT_OPENROUTER_BASE_URL,
            app_referer=get("APP_REFERER") or cls.app_referer,
            app_title=get("APP_TITLE") or cls.app_title,
            generation_timeout_seconds=float(get("GENERATION_TIMEOUT_SECONDS") or "60"),
            webhook_secret=get("ELEVENLABS_WEBHOOK_SECRET"),
            unverified_policy=policy,
            supabase_url=get("SUPABASE_URL"),
            supabase_service_key=get("SUPABASE_SERVICE_KEY"),
            kv_rest_api_url=get("KV_REST_API_URL"),
            kv_rest_api_token=get("KV_REST_API_TOKEN"),
            storage_timeout_seconds=float(get("STORAGE_TIMEOUT_SECONDS") or "10"),
            preview_base_url=(get("PREVIEW_BASE_URL") or "").rstrip("/"),
            dedup_db_path=get("WEBHOOK_DEDUP_DB_PATH"),
            audit_log_path=get("AUDIT_LOG_PATH"),
            max_body_bytes=int(get("MAX_BODY_BYTES") or str(1024 * 1024)),
            log_level=(get("LOG_LEVEL") or "INFO").upper(),
        )

    def preview_url(self, session_id: str) -> str:
        return f"{self.preview_base_url}/preview?id={session_id}"
