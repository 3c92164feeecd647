"""PipelineConfig and the error-handler contract."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import Response

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.hooks import PipelineHook
from starlette_request_pipeline.validation import ValidatorAdapter


@dataclass(frozen=True)
class ErrorContext:
    """What the error handler gets to see about a failed request.

    ``context`` is the last context built before the fault, or a synthetic
    one when the fault happened before extraction.
    """

    request: Request
    request_id: str
    error: Exception
    context: RequestContext


OnErrorHandler = Callable[[ErrorContext], Response | Awaitable[Response]]


@dataclass(frozen=True)
class PipelineConfig:
    """Startup configuration shared by every route of an application."""

    validator: ValidatorAdapter | None = None
    hooks: tuple[PipelineHook, ...] = ()
    on_error: OnErrorHandler | None = None
    debug: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "hooks", tuple(self.hooks))
