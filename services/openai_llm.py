# services/openai_llm.py
from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import AsyncOpenAI

from api.app.config import Settings

logger = logging.getLogger(__name__)


def build_client(settings: Settings, http_client: httpx.AsyncClient | None = None) -> AsyncOpenAI | None:
    """Create the upstream client, or None when no API key is configured."""
    if not settings.upstream_configured:
        return None
    return AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        default_headers=settings.upstream_headers,
        timeout=httpx.Timeout(
            settings.upstream_read_timeout,
            connect=settings.upstream_connect_timeout,
        ),
        max_retries=0,
        http_client=http_client,
    )


def build_messages(system_prompt: str, conversation: list[dict[str, str]]) -> list[dict[str, str]]:
    """System turn first, then the conversation in order."""
    return [{"role": "system", "content": system_prompt}, *conversation]


def open_chat_stream(
    client: AsyncOpenAI,
    settings: Settings,
    system_prompt: str,
    conversation: list[dict[str, str]],
) -> Any:
    """
    Start a streamed chat completion and return the raw-response context manager.

    Entering it sends the request; a non-2xx answer raises
    ``openai.APIStatusError`` and a network fault ``openai.APIConnectionError``.
    The entered response exposes ``iter_bytes()`` over the unparsed
    event stream.
    """
    messages = build_messages(system_prompt, conversation)
    logger.info("LLM: streaming %d messages to %s", len(messages), settings.openrouter_model)
    return client.chat.completions.with_streaming_response.create(
        model=settings.openrouter_model,
        messages=messages,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        stream=True,
    )
