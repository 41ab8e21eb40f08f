"""FastAPI application exposing the submission and webhook endpoints."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from src.api.handlers import GeneratePipeline, HandlerResponse, WebhookPipeline
from src.audit.logger import AuditLogger
from src.config import AppConfig
from src.generation.client import GenerationClient
from src.storage.base import SiteStore
from src.storage.kv import KVSiteStore
from src.storage.supabase import SupabaseSiteStore
from src.webhook.replay_protection import ConversationReplayGuard
from src.webhook.signature import SIGNATURE_HEADERS, SignatureVerifier

logger = logging.getLogger(__name__)

_ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
_ALLOW_METHODS = "POST, OPTIONS"
_GENERATE_ALLOW_HEADERS = "Content-Type"
_WEBHOOK_ALLOW_HEADERS = ", ".join(("Content-Type", *SIGNATURE_HEADERS))


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    config = AppConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return create_app(config)


def build_store(config: AppConfig) -> SiteStore | None:
    """Pick the configured backend: Supabase, then KV, else none."""
    if config.supabase_url and config.supabase_service_key:
        return SupabaseSiteStore(
            config.supabase_url,
            config.supabase_service_key,
            timeout=config.storage_timeout_seconds,
        )
    if config.kv_rest_api_url and config.kv_rest_api_token:
        return KVSiteStore(
            config.kv_rest_api_url,
            config.kv_rest_api_token,
            timeout=config.storage_timeout_seconds,
        )
    logger.warning("No site store configured; results are returned inline only")
    return None


def create_app(
    config: AppConfig,
    generator: GenerationClient | None = None,
    store: SiteStore | None = None,
    replay_guard: ConversationReplayGuard | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the app; collaborators not passed in are built from ``config``."""
    if generator is None:
        generator = GenerationClient(config)
    if store is None:
        store = build_store(config)
    if replay_guard is None and config.dedup_db_path:
        replay_guard = ConversationReplayGuard(config.dedup_db_path)
    if audit_logger is None and config.audit_log_path:
        audit_logger = AuditLogger(config.audit_log_path)

    generate_pipeline = GeneratePipeline(
        config, generator, store=store, audit_logger=audit_logger,
    )
    webhook_pipeline = WebhookPipeline(
        config,
        generator,
        SignatureVerifier(config.webhook_secret),
        store=store,
        replay_guard=replay_guard,
        audit_logger=audit_logger,
    )

    app = FastAPI(docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.api_route("/api/generate", methods=_ROUTE_METHODS)
    async def generate(request: Request) -> Response:
        headers = _cors_headers(_GENERATE_ALLOW_HEADERS)
        early = _preflight_or_reject(request, headers)
        if early is not None:
            return early
        result = await generate_pipeline.handle(await request.body())
        return _to_response(result, headers)

    @app.api_route("/api/webhook", methods=_ROUTE_METHODS)
    async def webhook(request: Request) -> Response:
        headers = _cors_headers(_WEBHOOK_ALLOW_HEADERS)
        early = _preflight_or_reject(request, headers)
        if early is not None:
            return early
        # Raw bytes are read once and used for both verification and decoding.
        body = await request.body()
        result = await webhook_pipeline.handle(
            request.headers,
            body,
            source_ip=request.client.host if request.client else None,
        )
        return _to_response(result, headers)

    return app


def _cors_headers(allow_headers: str) -> dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": _ALLOW_METHODS,
        "Access-Control-Allow-Headers": allow_headers,
    }


def _preflight_or_reject(request: Request, headers: dict[str, str]) -> Response | None:
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=headers)
    if request.method != "POST":
        return JSONResponse({"error": "Method not allowed"}, status_code=405, headers=headers)
    return None


def _to_response(result: HandlerResponse, headers: dict[str, str]) -> JSONResponse:
    return JSONResponse(result.body, status_code=result.status_code, headers=headers)
