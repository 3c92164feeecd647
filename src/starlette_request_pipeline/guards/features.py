"""Feature flag guards."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from starlette.responses import PlainTextResponse, Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import Allow, Deny, Guard, GuardResult


class FeatureEnabled(Guard):
    """Checks a feature flag is enabled via callback or ``locals["features"]``."""

    def __init__(
        self,
        feature: str,
        checker: Callable[[str], Awaitable[bool]] | None = None,
        *,
        response: Callable[[RequestContext], Response] | None = None,
    ) -> None:
        self._feature = feature
        self._checker = checker
        self._response = response

    def _deny(self, ctx: RequestContext) -> Deny:
        if self._response is not None:
            return Deny(self._response(ctx))
        return Deny(PlainTextResponse("Feature disabled", status_code=403))

    async def check(self, ctx: RequestContext) -> GuardResult:
        if self._checker is not None:
            enabled = await self._checker(self._feature)
            return Allow() if enabled else self._deny(ctx)

        features = ctx.locals.get("features", {})
        if not features.get(self._feature):
            return self._deny(ctx)
        return Allow()
