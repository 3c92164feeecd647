"""Tests for Route descriptors and Group flattening."""

from __future__ import annotations

from typing import Any

import pytest
from starlette.responses import PlainTextResponse

from starlette_request_pipeline import route
from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.group import Group, flatten_routes
from starlette_request_pipeline.route import (
    ResolveResult,
    Route,
    failure,
    success,
)
from starlette_request_pipeline.validation import InputSchemas


def _handler(ctx: RequestContext) -> PlainTextResponse:
    return PlainTextResponse("ok")


def _guard(name: str) -> Any:
    def guard(ctx: RequestContext) -> None:
        return None

    guard.__name__ = name
    return guard


def _names(r: Route) -> list[str]:
    return [g.__name__ for g in r.guards]


class TestRoute:
    def test_method_normalized(self) -> None:
        assert Route("get", "/", _handler).method == "GET"

    def test_label(self) -> None:
        assert Route("POST", "/users", _handler).label == "POST /users"

    def test_any_method_matches_everything(self) -> None:
        r = route.all_methods("/x", _handler)
        assert r.method == "*"
        assert r.matches_method("PROPFIND")

    def test_specific_method(self) -> None:
        r = route.get("/x", _handler)
        assert r.matches_method("get")
        assert not r.matches_method("POST")

    @pytest.mark.parametrize(
        ("factory", "method"),
        [
            (route.get, "GET"),
            (route.head, "HEAD"),
            (route.post, "POST"),
            (route.put, "PUT"),
            (route.patch, "PATCH"),
            (route.delete, "DELETE"),
            (route.options, "OPTIONS"),
        ],
    )
    def test_verb_factories(self, factory: Any, method: str) -> None:
        assert factory("/x", _handler).method == method

    def test_custom_method(self) -> None:
        assert route.on("PROPFIND", "/dav", _handler).method == "PROPFIND"

    def test_schema_shortcuts(self) -> None:
        r = route.post("/x", _handler, body=dict, params=dict)
        assert r.input == InputSchemas(body=dict, params=dict)

    def test_explicit_input_wins(self) -> None:
        schemas = InputSchemas(query=dict)
        assert route.get("/x", _handler, input=schemas).input is schemas

    def test_guards_stored_as_tuple(self) -> None:
        r = route.get("/x", _handler, guards=[_guard("a")])
        assert isinstance(r.guards, tuple)

    def test_with_outer_guards_prepends(self) -> None:
        r = route.get("/x", _handler, guards=[_guard("route")])
        wrapped = r.with_outer_guards([_guard("outer")])
        assert _names(wrapped) == ["outer", "route"]
        assert _names(r) == ["route"]


class TestResolveResult:
    def test_success(self) -> None:
        response = PlainTextResponse("ok")
        assert success(response) == ResolveResult(ok=True, response=response)

    def test_failure(self) -> None:
        response = PlainTextResponse("bad", status_code=400)
        assert failure(response).ok is False


class TestGroup:
    def test_init_empty(self) -> None:
        assert Group().resolve() == ()

    def test_add_returns_self(self) -> None:
        group = Group()
        assert group.add(route.get("/", _handler)) is group

    def test_preserves_registration_order(self) -> None:
        a = route.get("/a", _handler)
        b = route.get("/b", _handler)
        assert Group(a, b).resolve() == (a, b)

    def test_group_guards_precede_route_guards(self) -> None:
        group = Group(
            route.get("/a", _handler, guards=[_guard("route")]),
            guards=[_guard("group")],
        )
        (resolved,) = group.resolve()
        assert _names(resolved) == ["group", "route"]

    def test_nested_groups_outer_first(self) -> None:
        inner = Group(
            route.get("/api/users", _handler, guards=[_guard("route")]),
            guards=[_guard("inner")],
        )
        outer = Group(inner, guards=[_guard("outer")])
        (resolved,) = outer.resolve()
        assert _names(resolved) == ["outer", "inner", "route"]

    def test_lists_are_flattened(self) -> None:
        users = [route.get("/users", _handler), route.post("/users", _handler)]
        products = [route.get("/products", _handler)]
        resolved = Group(users, products, route.get("/", _handler)).resolve()
        assert [r.label for r in resolved] == [
            "GET /users",
            "POST /users",
            "GET /products",
            "GET /",
        ]

    def test_resolve_caches_result(self) -> None:
        group = Group(route.get("/", _handler))
        assert group.resolve() is group.resolve()

    def test_add_invalidates_resolve_cache(self) -> None:
        group = Group(route.get("/", _handler))
        first = group.resolve()
        group.add(route.get("/b", _handler))
        second = group.resolve()
        assert first is not second
        assert len(second) == 2

    def test_inner_add_after_outer_resolve(self) -> None:
        inner = Group(route.get("/a", _handler), guards=[_guard("inner")])
        outer = Group(inner, guards=[_guard("outer")])
        assert [r.path for r in outer.resolve()] == ["/a"]

        inner.add(route.get("/b", _handler))
        resolved = outer.resolve()
        assert [r.path for r in resolved] == ["/a", "/b"]
        assert _names(resolved[1]) == ["outer", "inner"]

    def test_inner_add_inside_list_after_outer_resolve(self) -> None:
        inner = Group(route.get("/a", _handler))
        outer = Group([inner])
        outer.resolve()
        inner.add(route.get("/b", _handler))
        assert len(outer) == 2

    def test_iterable_and_sized(self) -> None:
        group = Group(route.get("/a", _handler), route.get("/b", _handler))
        assert len(group) == 2
        assert [r.path for r in group] == ["/a", "/b"]

    def test_flatten_routes(self) -> None:
        a = route.get("/a", _handler)
        b = route.get("/b", _handler)
        assert flatten_routes([a], Group(b)) == (a, b)
