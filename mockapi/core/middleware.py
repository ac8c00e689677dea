"""ASGI middleware for the mock server (open CORS header, simulated latency)."""
from __future__ import annotations

import asyncio
import logging
import random

from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

LATENCY_RANGE_SECONDS = (0.025, 0.3)


class MockHeadersMiddleware(BaseHTTPMiddleware):
    """Allow any origin on every response and optionally delay each request."""

    def __init__(self, app, *, latency_factor: float = 0.0) -> None:
        super().__init__(app)
        self._latency_factor = max(0.0, latency_factor)

    def latency(self) -> float:
        if not self._latency_factor:
            return 0.0
        return random.uniform(*LATENCY_RANGE_SECONDS) * self._latency_factor

    async def dispatch(self, request, call_next):
        delay = self.latency()
        if delay:
            logger.debug("Delaying %s %s by %.3fs", request.method, request.url.path, delay)
            await asyncio.sleep(delay)
        response = await call_next(request)
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        return response
