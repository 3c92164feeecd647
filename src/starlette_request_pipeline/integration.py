"""FastAPI integration: serve pipeline routes from an existing FastAPI app."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import Response

from starlette_request_pipeline.config import PipelineConfig
from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.group import RouteItem, flatten_routes
from starlette_request_pipeline.request_id import resolve_request_id
from starlette_request_pipeline.route import ANY_METHOD, Route
from starlette_request_pipeline.runtime import (
    handle_fault,
    run_pipeline,
    run_request_hooks,
)
from starlette_request_pipeline.validation import check_validator

ALL_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


def route_endpoint(
    route: Route, config: PipelineConfig
) -> Callable[[Request], Awaitable[Response]]:
    """Return a Starlette/FastAPI endpoint that runs ``route`` through the pipeline.

    FastAPI has already matched the path, so ``request.path_params`` become
    the raw params and request hooks run after routing.
    """

    async def endpoint(request: Request) -> Response:
        request_id = resolve_request_id(request.headers)
        try:
            initial = await run_request_hooks(request, config.hooks)
        except Exception as exc:
            return await handle_fault(
                config,
                request,
                request_id,
                exc,
                RequestContext.synthetic(request, request_id),
            )

        params = {key: str(value) for key, value in request.path_params.items()}
        return await run_pipeline(
            request,
            route,
            params,
            config,
            request_id=request_id,
            initial_locals=initial,
        )

    endpoint.__name__ = getattr(route.handler, "__name__", "endpoint")
    endpoint._pipeline_route = route  # type: ignore[attr-defined]
    return endpoint


def include_routes(
    app: FastAPI, *routes: RouteItem, config: PipelineConfig | None = None
) -> tuple[Route, ...]:
    """Register routes on a FastAPI app. Call during app setup.

    Raises ConfigurationError before registering anything if a route
    declares input schemas and ``config`` has no validator.
    """
    config = config or PipelineConfig()
    resolved = flatten_routes(*routes)
    check_validator(resolved, config.validator)

    for route in resolved:
        methods = list(ALL_METHODS) if route.method == ANY_METHOD else [route.method]
        app.add_api_route(
            route.path,
            route_endpoint(route, config),
            methods=methods,
            name=route.label,
        )
    return resolved
