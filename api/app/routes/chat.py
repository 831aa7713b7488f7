# api/app/routes/chat.py
from __future__ import annotations

import json
import logging
import math
import time
from collections.abc import AsyncIterable, AsyncIterator
from contextlib import AsyncExitStack

import anyio
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from openai import APIError, APIStatusError, AsyncOpenAI

from ai.prompt_builder import assemble_prompt
from api.app.config import Settings
from api.app.dependencies import get_app_settings, get_client_ip, get_llm_client, get_rate_limiter
from api.app.schemas.chat import InvalidChatRequest, sanitize_messages, validate_chat_request
from services.event_stream import EventStreamDecoder, iter_text_fragments
from services.openai_llm import open_chat_stream
from services.rate_limiter import RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

MSG_UNAVAILABLE = "Service temporarily unavailable"
MSG_RATE_LIMITED = "Too many requests. Please wait a moment and try again."
MSG_BAD_FORMAT = "Invalid request format"
MSG_BAD_DATA = "Invalid request data"
MSG_UPSTREAM_FAILED = "Failed to get response from AI"
MSG_INTERNAL = "Internal server error"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def _rate_limited(verdict: RateLimitResult, now: float) -> JSONResponse:
    retry_after = max(1, math.ceil(verdict.retry_after(now)))
    return _error(
        status.HTTP_429_TOO_MANY_REQUESTS,
        MSG_RATE_LIMITED,
        headers={
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": str(math.ceil(verdict.reset_at)),
            "Retry-After": str(retry_after),
        },
    )


async def _until(chunks: AsyncIterable[bytes], deadline: float) -> AsyncIterator[bytes]:
    """Pass chunks through until the monotonic deadline has passed."""
    async for chunk in chunks:
        yield chunk
        if time.monotonic() >= deadline:
            logger.warning("Relay: request deadline reached, ending stream early")
            return


async def relay_stream(upstream, exit_stack: AsyncExitStack, deadline: float) -> AsyncIterator[bytes]:
    """
    Re-emit upstream event-stream fragments as raw UTF-8 text.

    A failure while reading ends the stream; the client still sees a
    clean close. The upstream response is released on every exit path,
    including cancellation when the client goes away.
    """
    decoder = EventStreamDecoder()
    try:
        async for fragment in iter_text_fragments(_until(upstream.iter_bytes(), deadline), decoder):
            yield fragment.encode("utf-8")
    except Exception:
        logger.exception("Relay: upstream stream aborted")
    finally:
        with anyio.CancelScope(shield=True):
            await exit_stack.aclose()
        logger.info(
            "Relay: closed (%d fragments, %d malformed lines skipped, done=%s)",
            decoder.stats.fragments, decoder.stats.skipped, decoder.stats.done,
        )


@router.post("/chat")
async def chat(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    client: AsyncOpenAI | None = Depends(get_llm_client),
):
    """Stream a coach reply for the posted conversation as plain text."""
    if client is None:
        logger.error("Chat refused: OPENROUTER_API_KEY is not configured")
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, MSG_UNAVAILABLE)

    try:
        identifier = get_client_ip(request)
        verdict = limiter.check(identifier)
        if not verdict.allowed:
            logger.warning("Rate limit exceeded for %s (resets at %.0f)", identifier, verdict.reset_at)
            return _rate_limited(verdict, limiter.now())

        try:
            raw = json.loads(await request.body())
        except ValueError:
            logger.info("Chat request body is not valid JSON")
            return _error(status.HTTP_400_BAD_REQUEST, MSG_BAD_FORMAT)

        try:
            body = validate_chat_request(raw)
        except InvalidChatRequest:
            return _error(status.HTTP_400_BAD_REQUEST, MSG_BAD_DATA)

        system_prompt = assemble_prompt(body.user_age)
        conversation = sanitize_messages(body.messages)

        exit_stack = AsyncExitStack()
        try:
            upstream = await exit_stack.enter_async_context(
                open_chat_stream(client, settings, system_prompt, conversation)
            )
        except APIStatusError as exc:
            logger.error("Upstream returned status %d", exc.status_code)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_UPSTREAM_FAILED)
        except APIError as exc:
            logger.error("Upstream request failed: %s", type(exc).__name__)
            return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_UPSTREAM_FAILED)

        deadline = time.monotonic() + settings.request_deadline_seconds
        return StreamingResponse(
            relay_stream(upstream, exit_stack, deadline),
            media_type="text/plain; charset=utf-8",
            headers={
                "X-RateLimit-Remaining": str(verdict.remaining),
                "Cache-Control": "no-cache",
                "X-Accel-Buffering": "no",
            },
        )
    except Exception:
        logger.exception("Chat request failed unexpectedly")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, MSG_INTERNAL)
