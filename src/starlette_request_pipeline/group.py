"""Group class: ordered container of routes sharing an outer guard chain."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Union

from starlette_request_pipeline.guard import GuardFn
from starlette_request_pipeline.route import Route

RouteItem = Union[Route, "Group", Iterable["RouteItem"]]


class Group:
    """Ordered container of Route instances and nested groups.

    Guards given to a group run before the guards of everything inside it,
    so nesting yields outer → inner → route order.
    """

    def __init__(self, *items: RouteItem, guards: Iterable[GuardFn] = ()) -> None:
        self._items: list[RouteItem] = list(items)
        self._guards: tuple[GuardFn, ...] = tuple(guards)
        self._resolved: tuple[Route, ...] | None = None

    def add(self, *items: RouteItem) -> Group:
        self._items.extend(items)
        self._resolved = None
        return self

    def resolve(self) -> tuple[Route, ...]:
        if self._resolved is not None:
            return self._resolved

        flat: list[Route] = []
        nested = self._flatten(self._items, self._guards, flat)

        resolved = tuple(flat)
        # Only groups without nested groups cache
        if not nested:
            self._resolved = resolved
        return resolved

    def __iter__(self) -> Iterator[Route]:
        return iter(self.resolve())

    def __len__(self) -> int:
        return len(self.resolve())

    @staticmethod
    def _flatten(
        items: Iterable[RouteItem],
        guards: tuple[GuardFn, ...],
        out: list[Route],
    ) -> bool:
        """Append routes with ``guards`` prepended. Returns True if a Group was seen."""
        nested = False
        for item in items:
            if isinstance(item, Group):
                Group._flatten(item._items, guards + item._guards, out)
                nested = True
            elif isinstance(item, Route):
                out.append(item.with_outer_guards(guards))
            elif Group._flatten(item, guards, out):
                nested = True
        return nested


def flatten_routes(*items: RouteItem) -> tuple[Route, ...]:
    """Flatten routes, groups and nested iterables in registration order."""
    return Group(*items).resolve()
