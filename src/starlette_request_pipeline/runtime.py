"""Pipeline driver: extraction, validation, guards and handler inside one error boundary."""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from starlette_request_pipeline.chain import run_guards
from starlette_request_pipeline.config import ErrorContext, PipelineConfig
from starlette_request_pipeline.context import RequestContext, merge_locals
from starlette_request_pipeline.exceptions import GuardFailed, InvalidHandlerResult
from starlette_request_pipeline.extraction import extract_raw_facts
from starlette_request_pipeline.hooks import PipelineHook
from starlette_request_pipeline.request_id import resolve_request_id
from starlette_request_pipeline.route import ResolveResult, Route
from starlette_request_pipeline.trace import PipelineTrace
from starlette_request_pipeline.validation import validate_input

logger = logging.getLogger(__name__)


def internal_error_response() -> Response:
    return PlainTextResponse("Internal Server Error", status_code=500)


def not_found_response() -> Response:
    return PlainTextResponse("Not Found", status_code=404)


async def run_request_hooks(
    request: Request, hooks: Sequence[PipelineHook]
) -> Mapping[str, Any]:
    """Collect the pre-routing locals patch from every hook, in order."""
    initial: Mapping[str, Any] = {}
    for hook in hooks:
        initial = merge_locals(initial, await hook.on_request(request))
    return initial


async def handle_fault(
    config: PipelineConfig,
    request: Request,
    request_id: str,
    error: Exception,
    context: RequestContext,
) -> Response:
    """Turn an uncaught fault into exactly one response.

    Without an ``on_error`` handler, or when it fails itself, the fault is
    logged and a bare 500 goes out with no detail.
    """
    if config.on_error is None:
        logger.error(
            "Unhandled error in request %s (%s %s)",
            request_id,
            request.method,
            request.scope.get("path", ""),
            exc_info=error,
        )
        return internal_error_response()

    try:
        response = config.on_error(
            ErrorContext(
                request=request, request_id=request_id, error=error, context=context
            )
        )
        if inspect.isawaitable(response):
            response = await response
    except Exception:
        logger.exception("Error handler failed for request %s", request_id)
        return internal_error_response()

    if not isinstance(response, Response):
        logger.error(
            "Error handler returned %s for request %s, expected Response",
            type(response).__name__,
            request_id,
        )
        return internal_error_response()
    return response


async def call_handler(route: Route, ctx: RequestContext) -> Response:
    result = route.handler(ctx)
    if inspect.isawaitable(result):
        result = await result
    if isinstance(result, ResolveResult):
        return result.response
    if isinstance(result, Response):
        return result
    raise InvalidHandlerResult(route.label, result)


async def run_pipeline(
    request: Request,
    route: Route,
    params: Mapping[str, str | None],
    config: PipelineConfig,
    *,
    request_id: str | None = None,
    initial_locals: Mapping[str, Any] | None = None,
) -> Response:
    """Run one matched request through the pipeline and return its response.

    Validation never short-circuits: guards always run, and a denial wins
    over invalid input. Only a guard denial or the handler produce the
    response, except for faults, which go through :func:`handle_fault`.
    """
    if request_id is None:
        request_id = resolve_request_id(request.headers)
    trace = PipelineTrace() if config.debug else None
    ctx = RequestContext.synthetic(request, request_id, initial_locals)

    try:
        started = time.perf_counter()
        raw, body_errors = await extract_raw_facts(
            request, params, with_body=route.input.declares_body
        )
        if trace is not None:
            trace.record("extraction", started, "OK")

        started = time.perf_counter()
        validated = validate_input(route.input, raw, config.validator, body_errors)
        if trace is not None:
            trace.record("validation", started, "OK" if validated.ok else "INVALID")
        if not validated.ok:
            logger.debug(
                "Input validation failed for request %s with %d error(s)",
                request_id,
                len(validated.errors),
            )

        ctx = RequestContext(
            request=request,
            request_id=request_id,
            raw=raw,
            input=validated,
            locals=ctx.locals,
        )

        outcome = await run_guards(ctx, route.guards, config.hooks, trace)
        ctx = outcome.context
        if outcome.denial is not None:
            response = outcome.denial.response
        else:
            started = time.perf_counter()
            response = await call_handler(route, ctx)
            if trace is not None:
                trace.record("handler", started, "OK")

        for hook in config.hooks:
            await hook.on_response(ctx, response)
    except GuardFailed as exc:
        _finish_trace(request, trace, "ERROR", exc.cause)
        return await handle_fault(config, request, request_id, exc.cause, exc.context)
    except Exception as exc:
        _finish_trace(request, trace, "ERROR", exc)
        return await handle_fault(config, request, request_id, exc, ctx)

    _finish_trace(request, trace, "DENIED" if outcome.denied else "OK")
    return response


def _finish_trace(
    request: Request,
    trace: PipelineTrace | None,
    outcome: Any,
    error: Exception | None = None,
) -> None:
    if trace is None:
        return
    trace.finish(outcome, error)
    request.state.pipeline_trace = trace
    logger.debug(
        "Pipeline %s in %.2fms: %s",
        outcome,
        trace.total_duration_ms,
        ", ".join(f"{e.stage}={e.outcome}" for e in trace.entries),
    )
