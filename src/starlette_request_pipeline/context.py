"""RequestContext: per-request value threaded through guards and the handler."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from starlette.requests import Request

from starlette_request_pipeline.extraction import RawFacts
from starlette_request_pipeline.validation import ValidatedInput, ValidInput

_EMPTY: Mapping[str, Any] = MappingProxyType({})


def merge_locals(
    current: Mapping[str, Any], patch: Mapping[str, Any] | None
) -> Mapping[str, Any]:
    """Layer ``patch`` over ``current`` into a new read-only mapping.

    Keys in ``patch`` win. Neither argument is modified.
    """
    if not patch:
        return current
    return MappingProxyType({**current, **patch})


@dataclass(frozen=True)
class RequestContext:
    """Immutable per-request state: raw facts, validated input and locals."""

    request: Request
    request_id: str
    raw: RawFacts = field(default_factory=RawFacts)
    input: ValidatedInput = field(default_factory=ValidInput)
    locals: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    def __post_init__(self) -> None:
        if not isinstance(self.locals, MappingProxyType):
            object.__setattr__(self, "locals", MappingProxyType(dict(self.locals)))

    def with_locals(self, patch: Mapping[str, Any] | None) -> RequestContext:
        if not patch:
            return self
        return replace(self, locals=merge_locals(self.locals, patch))

    @classmethod
    def synthetic(
        cls,
        request: Request,
        request_id: str,
        locals: Mapping[str, Any] | None = None,
    ) -> RequestContext:
        """Context for a failure that happened before extraction finished."""
        return cls(
            request=request,
            request_id=request_id,
            locals=merge_locals(_EMPTY, locals),
        )
