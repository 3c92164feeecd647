"""Router: method + path matching over Starlette's compiled path patterns."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from starlette.routing import compile_path

from starlette_request_pipeline.route import Route


@dataclass(frozen=True)
class RouteMatch:
    route: Route
    params: dict[str, str | None]


class Router:
    """First-match route table. Params are returned as raw strings."""

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: tuple[tuple[Route, re.Pattern[str]], ...] = tuple(
            (route, compile_path(route.path)[0]) for route in routes
        )

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(route for route, _ in self._routes)

    def match(self, method: str, path: str) -> RouteMatch | None:
        for route, pattern in self._routes:
            if not route.matches_method(method):
                continue
            found = pattern.match(path)
            if found is not None:
                return RouteMatch(route=route, params=found.groupdict())
        return None
