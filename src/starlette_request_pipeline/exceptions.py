"""PipelineException hierarchy for faults and startup misconfiguration."""

from __future__ import annotations

from typing import Any


def _name(obj: object) -> str:
    return getattr(obj, "__name__", type(obj).__name__)


class PipelineException(Exception):
    """Base for all pipeline exceptions."""


class ConfigurationError(PipelineException):
    """Route table cannot be served with the given configuration."""

    def __init__(self, detail: str, *, route: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.route = route


class InvalidGuardResult(PipelineException, TypeError):
    """A guard returned something other than a GuardResult, None or a Response."""

    def __init__(self, guard: object, result: object) -> None:
        super().__init__(
            f"Guard {_name(guard)!r} returned {type(result).__name__}, "
            "expected Allow, Deny, Response or None"
        )
        self.guard = guard
        self.result = result


class GuardFailed(PipelineException):
    """A guard raised. Carries the context it was given so the fault can be reported against it."""

    def __init__(self, guard: object, context: Any, *, cause: Exception) -> None:
        super().__init__(f"Guard {_name(guard)!r} raised {type(cause).__name__}")
        self.guard = guard
        self.context = context
        self.cause = cause


class InvalidHandlerResult(PipelineException, TypeError):
    """A handler returned something other than a Response or ResolveResult."""

    def __init__(self, route: str, result: object) -> None:
        super().__init__(
            f"Handler for {route} returned {type(result).__name__}, "
            "expected Response or ResolveResult"
        )
        self.route = route
        self.result = result
