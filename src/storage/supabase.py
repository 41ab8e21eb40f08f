"""Supabase row-insert backend (PostgREST ``generated_sites`` table)."""

from __future__ import annotations

import httpx

from src.models import GenerationResult
from src.storage.base import SiteStore

TABLE = "generated_sites"


class SupabaseSiteStore(SiteStore):
    name = "Supabase"

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout, http_client=http_client)
        self._url = url.rstrip("/")
        self._service_key = service_key

    async def save(
        self,
        session_id: str,
        result: GenerationResult,
        conversation_id: str | None = None,
    ) -> None:
        row = {
            "id": session_id,
            "conversation_id": conversation_id,
            "business_info": result.business_info,
            "modern_html": result.modern,
            "classic_html": result.classic,
            "warm_html": result.warm,
        }
        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }
        await self._post(f"{self._url}/rest/v1/{TABLE}", headers, json=row)
