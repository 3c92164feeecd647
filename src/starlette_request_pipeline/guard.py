"""Guard abstraction and the Allow/Deny result union."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from starlette.responses import Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.exceptions import InvalidGuardResult


@dataclass(frozen=True)
class Allow:
    """Let the request through, optionally contributing locals."""

    locals: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class Deny:
    """Stop the request. ``response`` is sent as-is."""

    response: Response


GuardResult = Allow | Deny


def allow(**locals: Any) -> Allow:
    return Allow(locals or None)


def deny(response: Response) -> Deny:
    return Deny(response)


class Guard(ABC):
    """Base class for reusable access-control checks."""

    @abstractmethod
    async def check(self, ctx: RequestContext) -> GuardResult: ...

    async def __call__(self, ctx: RequestContext) -> GuardResult:
        return await self.check(ctx)


GuardFn = Callable[
    [RequestContext],
    GuardResult | Response | None | Awaitable[GuardResult | Response | None],
]


def normalize_result(guard: object, result: object) -> GuardResult:
    """``None`` allows, a bare Response denies."""
    if isinstance(result, (Allow, Deny)):
        return result
    if result is None:
        return Allow()
    if isinstance(result, Response):
        return Deny(result)
    raise InvalidGuardResult(guard, result)
