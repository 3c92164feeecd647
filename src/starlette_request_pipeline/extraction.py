"""Raw request fact extraction: params, query, cookies and the lazy body."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from starlette.datastructures import QueryParams
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from starlette_request_pipeline.validation import NOT_PROVIDED, ValidationError

_FORM_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})

BodyErrors = tuple[ValidationError, ...]


@dataclass(frozen=True)
class RawFacts:
    """Untrusted values taken straight from the request, before any schema."""

    params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str | tuple[str, ...]] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: Any = NOT_PROVIDED


def _collapse(items: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """One value per key stays scalar, repeated keys become an ordered tuple."""
    grouped: dict[str, list[Any]] = {}
    for key, value in items:
        grouped.setdefault(key, []).append(value)
    return {
        key: values[0] if len(values) == 1 else tuple(values)
        for key, values in grouped.items()
    }


def parse_query(query_string: str) -> dict[str, str | tuple[str, ...]]:
    return _collapse(QueryParams(query_string).multi_items())


def _media_type(header: str) -> tuple[str, str]:
    media_type, _, params = header.partition(";")
    charset = "utf-8"
    for param in params.split(";"):
        name, _, value = param.strip().partition("=")
        if name.lower() == "charset" and value:
            charset = value.strip('"')
    return media_type.strip().lower(), charset


async def read_body(request: Request) -> tuple[Any, BodyErrors]:
    """Consume and parse the request body according to its Content-Type.

    Malformed input never raises: it comes back as a single error at path
    ``("body",)`` and the value is NOT_PROVIDED.
    """
    media_type, charset = _media_type(request.headers.get("content-type", ""))

    if media_type == "application/json" or media_type.endswith("+json"):
        raw = await request.body()
        try:
            return json.loads(raw), ()
        except ValueError:
            return NOT_PROVIDED, (ValidationError(("body",), "Invalid JSON"),)

    try:
        if media_type in _FORM_TYPES:
            form = await request.form()
            return _collapse(form.multi_items()), ()
        raw = await request.body()
        return raw.decode(charset), ()
    except HTTPException as exc:
        return NOT_PROVIDED, (ValidationError(("body",), str(exc.detail)),)
    except (MultiPartException, ValueError, LookupError) as exc:
        return NOT_PROVIDED, (ValidationError(("body",), str(exc)),)


async def extract_raw_facts(
    request: Request,
    params: Mapping[str, str | None],
    *,
    with_body: bool,
) -> tuple[RawFacts, BodyErrors]:
    """Build RawFacts. The body stream is only touched when ``with_body`` is set."""
    body: Any = NOT_PROVIDED
    body_errors: BodyErrors = ()
    if with_body:
        body, body_errors = await read_body(request)

    raw = RawFacts(
        params={key: value for key, value in params.items() if value is not None},
        query=_collapse(request.query_params.multi_items()),
        cookies=dict(request.cookies),
        body=body,
    )
    return raw, body_errors
