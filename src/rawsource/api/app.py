"""FastAPI app exposing the resolution pipeline to a static front-end."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from rawsource.config import Settings, load_settings
from rawsource.logging import configure_logging, get_logger
from rawsource.orchestrator.runner import Pipeline, PipelineError
from rawsource.sources.registry import detect_source, list_sources
from rawsource.tools.page_fetcher import build_http_client

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(settings: Settings | None = None, pipeline: Pipeline | None = None) -> FastAPI:
    """Create FastAPI app.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        pipeline: Pre-built pipeline (tests); otherwise one is built at startup around a
            shared HTTP client that is closed on shutdown.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if pipeline is not None:
            app.state.pipeline = pipeline
            yield
            return
        async with build_http_client(settings) as client:
            app.state.pipeline = Pipeline.from_settings(settings, client)
            yield

    app = FastAPI(title="rawsource", version="0.1.0", lifespan=lifespan)

    @app.middleware("http")
    async def cors(request: Request, call_next: Any) -> Response:
        if request.method == "OPTIONS":
            response: Response = Response(status_code=204)
        else:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("Unhandled error for %s %s", request.method, request.url.path)
                response = JSONResponse({"error": "Internal error"}, status_code=500)
        for k, v in CORS_HEADERS.items():
            response.headers[k] = v
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/search")
    async def search(request: Request, q: str | None = None, debug: str | None = None) -> JSONResponse:
        logger.info("API search requested", extra={"query_len": len(q or ""), "debug": debug == "1"})
        try:
            payload = await request.app.state.pipeline.run_payload(q, debug=debug == "1")
        except PipelineError as e:
            body = {"error": e.error}
            if e.message:
                body["message"] = e.message
            return JSONResponse(body, status_code=400)
        return JSONResponse(payload)

    @app.get("/sources")
    def sources() -> list[dict[str, str]]:
        return [
            {
                "source": s.source_id,
                "domain": s.domain,
                "pattern": s.url_pattern,
                "canonicalTemplate": s.canonical_template,
            }
            for s in list_sources()
        ]

    @app.get("/detect")
    def detect(url: str = "") -> dict[str, Any]:
        match = detect_source(url)
        if match is None:
            return {"matched": False}
        return {"matched": True, **match.model_dump(mode="json", by_alias=True)}

    return app
