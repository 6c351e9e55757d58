"""
FastAPI application for the Semantic Scholar rate-limiting proxy.

Clients point their base URL at this service instead of the public API.
The proxy attaches the shared API key, spaces batch requests out to the
key's rate limit and retries upstream "too many requests" answers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from ..config import RATE_LIMIT_EXHAUSTED_HEADER
from .config import ProxySettings
from .limiter import RateLimiter

logger = logging.getLogger("citation-graph")

PAPER_BATCH = "/graph/v1/paper/batch"
UPSTREAM_PAPER_BATCH = "/paper/batch"


def create_app(
    settings: Optional[ProxySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the proxy application.

    Args:
        settings: Proxy settings; read from the environment if omitted.
        transport: Optional httpx transport for the upstream client.

    Returns:
        The FastAPI app. The upstream client and limiter live in
        ``app.state`` for the lifetime of the app.
    """
    settings = settings or ProxySettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.limiter = RateLimiter(settings.MIN_INTERVAL)
        app.state.upstream = httpx.AsyncClient(
            base_url=settings.UPSTREAM_URL.rstrip("/"),
            headers={"x-api-key": settings.API_KEY},
            timeout=settings.REQUEST_TIMEOUT,
            transport=transport,
        )
        logger.info(f"Proxying {PAPER_BATCH} to {settings.UPSTREAM_URL}")
        try:
            yield
        finally:
            await app.state.upstream.aclose()

    app = FastAPI(
        title="Semantic Scholar Rate-Limiting Proxy",
        description="Shares one Semantic Scholar API key within its rate limit",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.post(PAPER_BATCH)
    async def paper_batch(request: Request) -> Response:
        """
        Forward a paper batch request upstream.

        Returns the upstream response unchanged, except that an exhausted
        429 retry budget becomes a 504 marked with the rate-limit header
        and a transport failure becomes 502.
        """
        limiter: RateLimiter = request.app.state.limiter
        upstream: httpx.AsyncClient = request.app.state.upstream

        body = await request.body()
        params = list(request.query_params.multi_items())
        headers = {"content-type": request.headers.get("content-type", "application/json")}

        for attempt in range(settings.MAX_ATTEMPTS):
            await limiter.acquire()
            try:
                response = await upstream.post(
                    UPSTREAM_PAPER_BATCH,
                    content=body,
                    params=params,
                    headers=headers,
                )
            except httpx.HTTPError as e:
                logger.error(f"Upstream request failed: {e}")
                return JSONResponse(
                    status_code=502,
                    content={"error": f"Upstream request failed: {e}"},
                )

            if response.status_code == 429:
                logger.warning(
                    f"Upstream rate limited us (attempt {attempt + 1}/{settings.MAX_ATTEMPTS})"
                )
                continue

            return Response(
                content=response.content,
                status_code=response.status_code,
                media_type=response.headers.get("content-type"),
            )

        logger.error(f"Upstream still rate limited after {settings.MAX_ATTEMPTS} attempts")
        return JSONResponse(
            status_code=504,
            content={
                "error": f"Upstream rate limited after {settings.MAX_ATTEMPTS} attempts",
            },
            headers={RATE_LIMIT_EXHAUSTED_HEADER: "true"},
        )

    return app
