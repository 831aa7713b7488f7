# api/app/middleware/request_logging.py
"""
Access log line per request, written once the response body is complete.

Plain ASGI rather than BaseHTTPMiddleware so streamed bodies pass through
untouched and client disconnects still cancel the relay.
"""
from __future__ import annotations

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        t0 = time.monotonic()
        status_code = 500
        body_bytes = 0

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code, body_bytes
            if message["type"] == "http.response.start":
                status_code = message["status"]
            elif message["type"] == "http.response.body":
                body_bytes += len(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed = (time.monotonic() - t0) * 1000
            logger.info(
                "%s %s → %d (%d bytes, %.0fms)",
                scope["method"], scope["path"], status_code, body_bytes, elapsed,
            )
