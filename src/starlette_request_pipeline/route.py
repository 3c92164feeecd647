"""Route descriptors, handler results and per-verb factory helpers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Any

from starlette.responses import Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.guard import GuardFn
from starlette_request_pipeline.validation import InputSchemas

ANY_METHOD = "*"


@dataclass(frozen=True)
class ResolveResult:
    """Handler outcome with explicit intent.

    ``ok=False`` marks an expected failure (bad input, missing resource);
    the response is still sent unchanged.
    """

    ok: bool
    response: Response


def success(response: Response) -> ResolveResult:
    return ResolveResult(ok=True, response=response)


def failure(response: Response) -> ResolveResult:
    return ResolveResult(ok=False, response=response)


HandlerReturn = Response | ResolveResult
Handler = Callable[[RequestContext], HandlerReturn | Awaitable[HandlerReturn]]


@dataclass(frozen=True)
class Route:
    """A method + path bound to a handler, its input schemas and guards."""

    method: str
    path: str
    handler: Handler
    input: InputSchemas = field(default_factory=InputSchemas)
    guards: tuple[GuardFn, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "guards", tuple(self.guards))

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    def matches_method(self, method: str) -> bool:
        return self.method == ANY_METHOD or self.method == method.upper()

    def with_outer_guards(self, guards: Iterable[GuardFn]) -> Route:
        """Return a copy whose chain starts with ``guards``."""
        outer = tuple(guards)
        if not outer:
            return self
        return replace(self, guards=outer + self.guards)


def on(
    method: str,
    path: str,
    handler: Handler,
    *,
    input: InputSchemas | None = None,
    body: Any = None,
    query: Any = None,
    params: Any = None,
    guards: Iterable[GuardFn] = (),
) -> Route:
    """Build a Route. Schemas come from ``input`` or the body/query/params shortcuts."""
    if input is None:
        input = InputSchemas(body=body, query=query, params=params)
    return Route(method, path, handler, input=input, guards=tuple(guards))


def _verb(method: str) -> Callable[..., Route]:
    def factory(path: str, handler: Handler, **kwargs: Any) -> Route:
        return on(method, path, handler, **kwargs)

    factory.__name__ = method.lower() if method != ANY_METHOD else "all_methods"
    factory.__doc__ = f"Build a {method} route."
    return factory


get = _verb("GET")
head = _verb("HEAD")
post = _verb("POST")
put = _verb("PUT")
patch = _verb("PATCH")
delete = _verb("DELETE")
options = _verb("OPTIONS")
all_methods = _verb(ANY_METHOD)
