# api/app/main.py
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from api.app.config import Settings, get_settings
from api.app.middleware.request_logging import RequestLoggingMiddleware
from api.app.routes import chat, health
from services.openai_llm import build_client
from services.rate_limiter import RateLimiter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    client: AsyncOpenAI | None = app.state.llm_client
    if client is not None:
        await client.close()


def create_app(
    settings: Settings | None = None,
    rate_limiter: RateLimiter | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the API. Arguments are injection points for tests."""
    settings = settings or get_settings()

    if not settings.upstream_configured:
        logger.error(
            "OPENROUTER_API_KEY is not set: every chat request will answer 503 "
            "until it is configured and the service restarted"
        )

    app = FastAPI(
        title="Thera Coach API",
        description="Streaming relay for the Thera Coach speech-practice chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    if rate_limiter is None:
        rate_limiter = RateLimiter(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
            sweep_threshold=settings.rate_limit_sweep_threshold,
        )
    app.state.rate_limiter = rate_limiter
    app.state.llm_client = build_client(settings, http_client=http_client)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router)
    app.include_router(chat.router, prefix="/api")
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run("api.app.main:app", host=settings.api_host, port=settings.api_port)
