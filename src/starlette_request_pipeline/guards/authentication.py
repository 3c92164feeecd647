"""Authentication guards: Bearer token, Cookie, API Key."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.responses import PlainTextResponse, Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import Allow, Deny, Guard, GuardResult

ResponseFactory = Callable[[RequestContext], Response]


def _unauthorized(ctx: RequestContext) -> Response:
    return PlainTextResponse("Unauthorized", status_code=401)


class _CredentialGuard(Guard):
    """Resolve a credential to a user and store it under ``locals_key``."""

    def __init__(
        self,
        resolver: Callable[[str], Awaitable[Any]],
        *,
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        self._resolver = resolver
        self._locals_key = locals_key
        self._response = response or _unauthorized

    @abstractmethod
    def credential(self, ctx: RequestContext) -> str | None: ...

    async def check(self, ctx: RequestContext) -> GuardResult:
        credential = self.credential(ctx)
        if not credential:
            return Deny(self._response(ctx))

        user = await self._resolver(credential)
        if user is None:
            return Deny(self._response(ctx))
        return Allow({self._locals_key: user})


class BearerAuthentication(_CredentialGuard):
    """Extracts a Bearer token from the Authorization header and decodes it via callback."""

    def __init__(
        self,
        decode: Callable[[str], Awaitable[Any]],
        *,
        scheme: str = "Bearer",
        header: str = "Authorization",
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        super().__init__(decode, locals_key=locals_key, response=response)
        self._scheme = scheme
        self._header = header

    def credential(self, ctx: RequestContext) -> str | None:
        auth_value = ctx.request.headers.get(self._header)
        if not auth_value:
            return None

        parts = auth_value.split(" ", 1)
        if len(parts) != 2 or parts[0] != self._scheme:
            return None
        return parts[1]


class CookieAuthentication(_CredentialGuard):
    """Reads a session cookie from the raw facts and looks up the user via callback."""

    def __init__(
        self,
        lookup: Callable[[str], Awaitable[Any]],
        *,
        cookie_name: str = "session",
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        super().__init__(lookup, locals_key=locals_key, response=response)
        self._cookie_name = cookie_name

    def credential(self, ctx: RequestContext) -> str | None:
        return ctx.raw.cookies.get(self._cookie_name)


class APIKeyAuthentication(_CredentialGuard):
    """Extracts an API key from a header and validates it via callback."""

    def __init__(
        self,
        validate: Callable[[str], Awaitable[Any]],
        *,
        header: str = "X-API-Key",
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        super().__init__(validate, locals_key=locals_key, response=response)
        self._header = header

    def credential(self, ctx: RequestContext) -> str | None:
        return ctx.request.headers.get(self._header)
