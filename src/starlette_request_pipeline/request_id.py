"""Request identifier resolution from tracing headers."""

from __future__ import annotations

import uuid
from collections.abc import Mapping


def _trace_id(traceparent: str | None) -> str | None:
    # version-traceid-parentid-flags
    if not traceparent:
        return None
    parts = traceparent.split("-")
    if len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def resolve_request_id(headers: Mapping[str, str]) -> str:
    """Pick the request id: traceparent > x-request-id > x-correlation-id > new UUID."""
    return (
        _trace_id(headers.get("traceparent"))
        or headers.get("x-request-id")
        or headers.get("x-correlation-id")
        or str(uuid.uuid4())
    )
