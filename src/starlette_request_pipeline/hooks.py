"""PipelineHook base and convenience hook classes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import GuardFn, GuardResult


class PipelineHook:
    """Base abstraction for lifecycle hooks. All methods are no-op by default."""

    async def on_request(self, request: Request) -> Mapping[str, Any] | None:
        """Runs before routing. May only contribute an initial locals patch."""
        return None

    async def on_guard(
        self,
        ctx: RequestContext,
        guard: GuardFn,
        result: GuardResult,
    ) -> None:
        pass

    async def on_response(self, ctx: RequestContext, response: Response) -> None:
        pass


class BeforeRequest(PipelineHook):
    """Convenience hook that only fires before routing."""

    def __init__(
        self, callback: Callable[[Request], Awaitable[Mapping[str, Any] | None]]
    ) -> None:
        self._callback = callback

    async def on_request(self, request: Request) -> Mapping[str, Any] | None:
        return await self._callback(request)


class AfterGuard(PipelineHook):
    """Convenience hook that fires after each guard with its result."""

    def __init__(
        self,
        callback: Callable[[RequestContext, GuardFn, GuardResult], Awaitable[None]],
    ) -> None:
        self._callback = callback

    async def on_guard(
        self,
        ctx: RequestContext,
        guard: GuardFn,
        result: GuardResult,
    ) -> None:
        await self._callback(ctx, guard, result)


class AfterResponse(PipelineHook):
    """Convenience hook that fires once the final response is known."""

    def __init__(
        self, callback: Callable[[RequestContext, Response], Awaitable[None]]
    ) -> None:
        self._callback = callback

    async def on_response(self, ctx: RequestContext, response: Response) -> None:
        await self._callback(ctx, response)
