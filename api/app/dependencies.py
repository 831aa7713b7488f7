# api/app/dependencies.py
from __future__ import annotations

from fastapi import Request
from openai import AsyncOpenAI

from api.app.config import Settings
from services.rate_limiter import RateLimiter

ANONYMOUS_CLIENT = "anonymous"


def get_client_ip(request: Request) -> str:
    """
    Derive the rate-limit key from proxy headers.

    Priority: X-Forwarded-For (first hop) → X-Real-IP → CF-Connecting-IP.
    Not a verified identity.
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value
    return ANONYMOUS_CLIENT


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_llm_client(request: Request) -> AsyncOpenAI | None:
    """The shared upstream client; None when the API key is missing."""
    return request.app.state.llm_client
