"""Permission guards: Authenticated, HasPermission, HasRole."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Callable

from starlette.responses import PlainTextResponse, Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import Allow, Deny, Guard, GuardResult

ResponseFactory = Callable[[RequestContext], Response]


def _forbidden(ctx: RequestContext) -> Response:
    return PlainTextResponse("Forbidden", status_code=403)


def _get_collection(user: object, attr: str) -> list[str] | None:
    """Extract a collection from user by dict key or attribute."""
    if isinstance(user, dict):
        val: list[str] | None = user.get(attr)
        return val
    return getattr(user, attr, None)


class _UserGuard(Guard):
    def __init__(
        self,
        *,
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        self._locals_key = locals_key
        self._response = response or _forbidden

    @abstractmethod
    def allowed(self, user: object) -> bool: ...

    async def check(self, ctx: RequestContext) -> GuardResult:
        user = ctx.locals.get(self._locals_key)
        if user is None or not self.allowed(user):
            return Deny(self._response(ctx))
        return Allow()


class Authenticated(_UserGuard):
    """Asserts an earlier guard or hook stored a user in locals."""

    def allowed(self, user: object) -> bool:
        return True


class HasPermission(_UserGuard):
    """Checks the user has the specified permission."""

    def __init__(
        self,
        permission: str,
        *,
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        super().__init__(locals_key=locals_key, response=response)
        self._permission = permission

    def allowed(self, user: object) -> bool:
        permissions = _get_collection(user, "permissions")
        return permissions is not None and self._permission in permissions


class HasRole(_UserGuard):
    """Checks the user has the specified role."""

    def __init__(
        self,
        role: str,
        *,
        locals_key: str = "user",
        response: ResponseFactory | None = None,
    ) -> None:
        super().__init__(locals_key=locals_key, response=response)
        self._role = role

    def allowed(self, user: object) -> bool:
        roles = _get_collection(user, "roles")
        return roles is not None and self._role in roles
