"""OpenRouter chat-completion client that turns a transcript into three sites."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from src.config import AppConfig
from src.errors import ConfigurationError, GenerationFormatError, UpstreamError
from src.generation.prompt import build_messages
from src.generation.unwrap import unwrap_fenced
from src.models import GenerationResult

logger = logging.getLogger(__name__)

MAX_TOKENS = 32000
TEMPERATURE = 0.7
# Raw model output kept in logs when it cannot be parsed.
_RAW_LOG_LIMIT = 4000


class GenerationClient:
    """Issues one completion request per transcript. Never retries."""

    def __init__(
        self,
        config: AppConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client

    async def generate(
        self, transcript: str, business_name: str | None = None,
    ) -> GenerationResult:
        """Generate the business profile and three site variants.

        Raises ConfigurationError before any network call when no API key is
        configured, UpstreamError on transport failure or a non-2xx answer,
        and GenerationFormatError when the answer cannot be parsed.
        """
        if not self._config.openrouter_api_key:
            raise ConfigurationError("OPENROUTER_API_KEY not configured")

        url = f"{self._config.openrouter_base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.openrouter_api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self._config.app_referer,
            "X-Title": self._config.app_title,
        }
        request_body: dict[str, Any] = {
            "model": self._config.openrouter_model_id,
            "messages": build_messages(transcript, business_name),
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

        logger.info(
            "Requesting generation from %s (transcript length %d)",
            self._config.openrouter_model_id, len(transcript),
        )
        resp = await self._post(url, request_body, headers)

        if not resp.is_success:
            raise UpstreamError(resp.status_code, resp.text)

        content = self._extract_content(resp)
        return parse_generation(content)

    async def _post(
        self, url: str, body: dict[str, Any], headers: dict[str, str],
    ) -> httpx.Response:
        timeout = self._config.generation_timeout_seconds
        try:
            if self._http_client is not None:
                return await self._http_client.post(
                    url, json=body, headers=headers, timeout=timeout,
                )
            async with httpx.AsyncClient() as client:
                return await client.post(url, json=body, headers=headers, timeout=timeout)
        except httpx.HTTPError as exc:
            raise UpstreamError(None, f"{type(exc).__name__}: {exc}") from exc

    @staticmethod
    def _extract_content(resp: httpx.Response) -> str:
        try:
            envelope = resp.json()
            content = envelope["choices"][0]["message"]["content"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected completion envelope: %s", resp.text[:_RAW_LOG_LIMIT])
            raise GenerationFormatError("completion envelope has no message content", resp.text) from exc
        if not isinstance(content, str):
            raise GenerationFormatError("message content is not text", str(content))
        return content


def parse_generation(content: str) -> GenerationResult:
    """Unwrap and validate the model's answer."""
    payload = unwrap_fenced(content).strip()
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        logger.error("Generation output is not valid JSON: %s", content[:_RAW_LOG_LIMIT])
        raise GenerationFormatError(f"invalid JSON ({exc.msg})", content) from exc

    try:
        return GenerationResult.model_validate(data)
    except PydanticValidationError as exc:
        logger.error("Generation output failed validation: %s", content[:_RAW_LOG_LIMIT])
        raise GenerationFormatError(
            f"missing or invalid fields ({exc.error_count()} errors)", content,
        ) from exc
