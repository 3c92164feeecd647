"""Throttling guards: RateLimit, ThrottleBackend, InMemoryThrottleBackend."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from starlette.responses import PlainTextResponse, Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import Allow, Deny, Guard, GuardResult


@runtime_checkable
class ThrottleBackend(Protocol):
    """Pluggable storage interface for rate limit counters."""

    async def increment(self, key: str, window_seconds: int) -> tuple[int, int]: ...
    async def reset(self, key: str) -> None: ...


class InMemoryThrottleBackend:
    """Default in-memory throttle backend. Single-process only."""

    def __init__(self) -> None:
        self._counters: dict[str, tuple[int, float]] = {}

    async def increment(self, key: str, window_seconds: int) -> tuple[int, int]:
        now = time.monotonic()
        if key in self._counters:
            count, window_start = self._counters[key]
            elapsed = now - window_start
            if elapsed >= window_seconds:
                self._counters[key] = (1, now)
                return 1, window_seconds
            new_count = count + 1
            self._counters[key] = (new_count, window_start)
            return new_count, max(int(window_seconds - elapsed), 1)
        self._counters[key] = (1, now)
        return 1, window_seconds

    async def reset(self, key: str) -> None:
        self._counters.pop(key, None)


def _default_key_func(ctx: RequestContext) -> str:
    """Derive rate limit key from user identity or client IP."""
    user = ctx.locals.get("user")
    if user is not None:
        return f"user:{user}"
    client = ctx.request.client
    if client is not None:
        return f"ip:{client.host}"
    forwarded = ctx.request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    return "ip:unknown"


def _too_many_requests(ctx: RequestContext, retry_after: int) -> Response:
    return PlainTextResponse(
        "Too Many Requests",
        status_code=429,
        headers={"Retry-After": str(retry_after)},
    )


class RateLimit(Guard):
    """Enforces a fixed-window rate limit with a pluggable backend."""

    def __init__(
        self,
        rate: int,
        window_seconds: int = 60,
        *,
        key_func: Callable[[RequestContext], str] | None = None,
        backend: ThrottleBackend | None = None,
        response: Callable[[RequestContext, int], Response] | None = None,
    ) -> None:
        self._rate = rate
        self._window_seconds = window_seconds
        self._key_func = key_func or _default_key_func
        self._backend: ThrottleBackend = backend or InMemoryThrottleBackend()
        self._response = response or _too_many_requests

    async def check(self, ctx: RequestContext) -> GuardResult:
        key = self._key_func(ctx)
        count, ttl = await self._backend.increment(key, self._window_seconds)
        if count > self._rate:
            return Deny(self._response(ctx, ttl))
        return Allow()
