"""PipelineApp: standalone ASGI application serving a route table."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response
from starlette.types import Receive, Scope, Send

from starlette_request_pipeline.config import PipelineConfig
from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.group import RouteItem, flatten_routes
from starlette_request_pipeline.request_id import resolve_request_id
from starlette_request_pipeline.router import Router
from starlette_request_pipeline.runtime import (
    handle_fault,
    not_found_response,
    run_pipeline,
    run_request_hooks,
)
from starlette_request_pipeline.validation import check_validator


class PipelineApp:
    """ASGI application that runs every matched request through the pipeline.

    Routes are flattened and checked once here; a route declaring input
    schemas without a configured validator raises ConfigurationError.
    """

    def __init__(self, *routes: RouteItem, config: PipelineConfig | None = None) -> None:
        self.config = config or PipelineConfig()
        resolved = flatten_routes(*routes)
        check_validator(resolved, self.config.validator)
        self.router = Router(resolved)

    async def handle(self, request: Request) -> Response:
        request_id = resolve_request_id(request.headers)
        try:
            initial = await run_request_hooks(request, self.config.hooks)
        except Exception as exc:
            return await handle_fault(
                self.config,
                request,
                request_id,
                exc,
                RequestContext.synthetic(request, request_id),
            )

        matched = self.router.match(request.method, request.scope["path"])
        if matched is None:
            return not_found_response()

        return await run_pipeline(
            request,
            matched.route,
            matched.params,
            self.config,
            request_id=request_id,
            initial_locals=initial,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            raise RuntimeError(f"Unsupported ASGI scope type {scope['type']!r}")

        request = Request(scope, receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    @staticmethod
    async def _lifespan(receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
