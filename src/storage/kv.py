"""Key/value backend over the Vercel KV / Upstash Redis REST API."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from src.models import GenerationResult
from src.storage.base import SiteStore

TTL_SECONDS = 7 * 24 * 60 * 60


class KVSiteStore(SiteStore):
    name = "KV"

    def __init__(
        self,
        url: str,
        token: str,
        ttl_seconds: int = TTL_SECONDS,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, http_client=http_client)
        self._url = url.rstrip("/")
        self._token = token
        self._ttl_seconds = ttl_seconds

    async def save(
        self,
        session_id: str,
        result: GenerationResult,
        conversation_id: str | None = None,
    ) -> None:
        # Stored in the same shape the model returned it.
        value = result.model_dump_json(by_alias=True)
        await self._post(
            f"{self._url}/set/{quote(session_id, safe='')}",
            {"Authorization": f"Bearer {self._token}"},
            params={"EX": str(self._ttl_seconds)},
            content=value.encode(),
        )
