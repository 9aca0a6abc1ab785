"""
Request logging middleware (plain ASGI).

Logs one line per HTTP request with method, path, final status, remote
address and elapsed time. The response passes through untouched.
"""

from __future__ import annotations

import logging
import time

from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


def _remote_address(scope: Scope) -> str:
    client = scope.get("client")
    if not client:
        return "-"
    host, port = client
    return f"{host}:{port}"


class RequestLoggingMiddleware:
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        # Reported when the app never starts a response.
        status_code = 200

        async def send_with_status(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_with_status)
        except Exception:
            # Unhandled errors are answered with a 500 further out.
            status_code = 500
            raise
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "request method=%s path=%s status=%s remote=%s duration_ms=%.2f",
                scope.get("method", "-"),
                scope.get("path", "-"),
                status_code,
                _remote_address(scope),
                duration_ms,
            )
