"""Rate limiting for the authentication endpoints."""

from __future__ import annotations

import asyncio
import time
from collections import defaultdict, deque
from typing import Any

from fastapi import Request, Response
from loguru import logger

from src.savemate.core.errors import RateLimited
from src.savemate.runtime.config.config_data import RateLimiterConfig


class DefaultLocalRateLimiter:
    """Sliding-window, in-memory limiter keyed by client, method and route."""

    def __init__(
        self, times: int, milliseconds: int, per_endpoint: bool, per_method: bool
    ) -> None:
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._times = times
        self._seconds = milliseconds / 1000
        self._per_endpoint = per_endpoint
        self._per_method = per_method
        self._last_cleanup = time.monotonic()
        self._cleanup_interval = 60.0  # seconds

    async def __call__(self, request: Request, response: Response) -> Any:
        key = self._make_key(request)
        await self._throttle(key)

    def _make_key(self, request: Request) -> str:
        client_host = request.client.host if request.client else "anonymous"
        parts = [f"ip:{client_host}"]
        if self._per_method:
            parts.append(request.method)
        if self._per_endpoint:
            route = request.scope.get("route")
            template = getattr(route, "path", None)
            parts.append((template or request.url.path).rstrip("/"))
        return ":".join(parts)

    def _cleanup_old_keys(self, now: float) -> None:
        """Drop keys whose hits have all left the window."""
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        stale = [
            key
            for key, hits in self._hits.items()
            if not hits or hits[-1] <= now - self._seconds
        ]
        for key in stale:
            del self._hits[key]

    async def reset(self) -> None:
        async with self._lock:
            self._hits.clear()

    async def _throttle(self, key: str) -> None:
        now = time.monotonic()
        window_start = now - self._seconds
        async with self._lock:
            self._cleanup_old_keys(now)
            hits = self._hits[key]
            while hits and hits[0] <= window_start:
                hits.popleft()
            if len(hits) >= self._times:
                retry_after = max(0, int(self._seconds - (now - hits[0])))
                logger.warning("Rate limit exceeded for {}", key)
                raise RateLimited(headers={"Retry-After": str(retry_after)})
            hits.append(now)


def create_rate_limiter(config: RateLimiterConfig) -> DefaultLocalRateLimiter | None:
    """Build the limiter described by ``config``, or None when limiting is disabled."""
    if not config.enabled:
        logger.info("Rate limiting disabled")
        return None
    return DefaultLocalRateLimiter(
        config.requests, config.window_ms, config.per_endpoint, config.per_method
    )
