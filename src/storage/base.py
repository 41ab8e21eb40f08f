"""Base class for generated-site persistence backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.errors import StorageError
from src.models import GenerationResult


class SiteStore(ABC):
    """Stores a generation result under a session id.

    Writes either succeed or raise StorageError. Callers treat a failed
    write as non-fatal and return the result inline instead.
    """

    name: str

    def __init__(self, timeout: float = 10.0, http_client: httpx.AsyncClient | None = None) -> None:
        self._timeout = timeout
        self._http_client = http_client

    @abstractmethod
    async def save(
        self,
        session_id: str,
        result: GenerationResult,
        conversation_id: str | None = None,
    ) -> None:
        """Persist ``result`` under ``session_id``."""
        ...

    async def _post(self, url: str, headers: dict[str, str], **kwargs: Any) -> httpx.Response:
        try:
            if self._http_client is not None:
                resp = await self._http_client.post(
                    url, headers=headers, timeout=self._timeout, **kwargs,
                )
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(url, headers=headers, timeout=self._timeout, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise StorageError(f"{self.name} unreachable: {type(exc).__name__}: {exc}") from exc

        if not resp.is_success:
            raise StorageError(f"{self.name} error: {resp.status_code} - {resp.text}")
        return resp
