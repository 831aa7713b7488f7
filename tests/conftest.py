# tests/conftest.py
from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from api.app.config import Settings
from api.app.main import create_app
from services.rate_limiter import RateLimiter

UPSTREAM_BASE_URL = "https://upstream.test/api/v1"


class FakeClock:
    """Manually advanced wall clock, in seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """httpx handler standing in for the chat-completions endpoint."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.chunks: list[bytes] = [
            b'data: {"choices":[{"delta":{"content":"Hi"}}]}\n\n',
            b"data: [DONE]\n\n",
        ]
        self.error: Exception | None = None

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    async def _body(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": {"message": "upstream secret detail"}})
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=self._body(),
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        openrouter_api_key="test-key",
        openrouter_base_url=UPSTREAM_BASE_URL,
        app_url="https://coach.example",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def make_client(clock: FakeClock, upstream: FakeUpstream) -> Callable[..., TestClient]:
    def _make(settings: Settings, rate_limiter: RateLimiter | None = None) -> TestClient:
        app = create_app(
            settings=settings,
            rate_limiter=rate_limiter if rate_limiter is not None else RateLimiter(clock=clock),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, settings: Settings):
    with make_client(settings) as test_client:
        yield test_client


def chat_body(content: str = "Hello!", age: int | None = 8) -> dict:
    return {"messages": [{"role": "user", "content": content}], "userAge": age}
