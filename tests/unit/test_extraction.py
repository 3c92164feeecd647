"""Tests for raw fact extraction and body parsing."""

from __future__ import annotations

from typing import Any

import pytest

from starlette_request_pipeline.extraction import (
    RawFacts,
    extract_raw_facts,
    parse_query,
    read_body,
)
from starlette_request_pipeline.validation import NOT_PROVIDED, ValidationError


class TestParseQuery:
    def test_repeated_key_becomes_sequence(self) -> None:
        assert parse_query("tag=a&tag=b&page=2") == {"tag": ("a", "b"), "page": "2"}

    def test_no_coercion(self) -> None:
        assert parse_query("n=1&flag=true") == {"n": "1", "flag": "true"}

    def test_preserves_appearance_order(self) -> None:
        assert parse_query("x=3&y=0&x=1&x=2")["x"] == ("3", "1", "2")

    def test_blank_values_kept(self) -> None:
        assert parse_query("q=") == {"q": ""}

    def test_percent_decoding(self) -> None:
        assert parse_query("name=J%C3%B6rg&q=a+b") == {"name": "Jörg", "q": "a b"}

    def test_empty(self) -> None:
        assert parse_query("") == {}


class TestReadBody:
    async def test_json(self, make_request: Any) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "application/json"},
            body=b'{"name": "Ada", "tags": [1, 2]}',
        )
        assert await read_body(request) == ({"name": "Ada", "tags": [1, 2]}, ())

    async def test_json_suffix_media_type(self, make_request: Any) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "application/vnd.api+json; charset=utf-8"},
            body=b"[1]",
        )
        assert await read_body(request) == ([1], ())

    @pytest.mark.parametrize("payload", [b"{not json", b"", b"\xff\xfe"])
    async def test_malformed_json(self, make_request: Any, payload: bytes) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "application/json"},
            body=payload,
        )
        value, errors = await read_body(request)
        assert value is NOT_PROVIDED
        assert errors == (ValidationError(("body",), "Invalid JSON"),)

    async def test_urlencoded_form(self, make_request: Any) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body=b"name=Ada&tag=a&tag=b",
        )
        value, errors = await read_body(request)
        assert errors == ()
        assert value == {"name": "Ada", "tag": ("a", "b")}

    async def test_multipart_form(self, make_request: Any) -> None:
        body = (
            b"--xyz\r\n"
            b'Content-Disposition: form-data; name="name"\r\n\r\n'
            b"Ada\r\n"
            b"--xyz--\r\n"
        )
        request = make_request(
            method="POST",
            headers={"Content-Type": "multipart/form-data; boundary=xyz"},
            body=body,
        )
        value, errors = await read_body(request)
        assert errors == ()
        assert value == {"name": "Ada"}

    async def test_text(self, make_request: Any) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "text/plain; charset=utf-8"},
            body="héllo".encode(),
        )
        assert await read_body(request) == ("héllo", ())

    async def test_missing_content_type_falls_back_to_text(
        self, make_request: Any
    ) -> None:
        request = make_request(method="POST", body=b'{"a": 1}')
        assert await read_body(request) == ('{"a": 1}', ())

    async def test_text_decode_failure_reports_underlying_message(
        self, make_request: Any
    ) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "text/plain"},
            body=b"\xff",
        )
        value, errors = await read_body(request)
        assert value is NOT_PROVIDED
        assert len(errors) == 1
        assert errors[0].path == ("body",)
        assert errors[0].message != "Invalid JSON"
        assert "utf-8" in errors[0].message

    async def test_unknown_charset_reported(self, make_request: Any) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "text/plain; charset=nope-42"},
            body=b"hi",
        )
        value, errors = await read_body(request)
        assert value is NOT_PROVIDED
        assert errors[0].path == ("body",)


class TestExtractRawFacts:
    async def test_query_params_and_cookies(self, make_request: Any) -> None:
        request = make_request(
            query_string="tag=a&tag=b&page=2",
            headers={"Cookie": "session=abc; theme=dark"},
        )
        raw, errors = await extract_raw_facts(request, {"id": "7"}, with_body=False)
        assert errors == ()
        assert raw.params == {"id": "7"}
        assert raw.query == {"tag": ("a", "b"), "page": "2"}
        assert raw.cookies == {"session": "abc", "theme": "dark"}
        assert raw.body is NOT_PROVIDED

    async def test_absent_params_dropped(self, make_request: Any) -> None:
        raw, _ = await extract_raw_facts(
            make_request(), {"id": "7", "slug": None}, with_body=False
        )
        assert raw.params == {"id": "7"}
        assert "slug" not in raw.params

    async def test_body_stream_untouched_without_body_schema(
        self, make_request: Any
    ) -> None:
        calls: list[str] = []

        async def receive() -> dict[str, Any]:
            calls.append("receive")
            return {"type": "http.request", "body": b"payload", "more_body": False}

        request = make_request(method="POST", receive=receive)
        await extract_raw_facts(request, {}, with_body=False)
        assert calls == []
        assert await request.body() == b"payload"

    async def test_body_read_once_with_body_schema(self, make_request: Any) -> None:
        calls: list[str] = []
        messages = [{"type": "http.request", "body": b'{"a": 1}', "more_body": False}]

        async def receive() -> dict[str, Any]:
            calls.append("receive")
            return messages.pop(0)

        request = make_request(
            method="POST",
            headers={"Content-Type": "application/json"},
            receive=receive,
        )
        raw, errors = await extract_raw_facts(request, {}, with_body=True)
        assert raw.body == {"a": 1}
        assert errors == ()
        assert calls == ["receive"]

    async def test_malformed_body_yields_error_not_exception(
        self, make_request: Any
    ) -> None:
        request = make_request(
            method="POST",
            headers={"Content-Type": "application/json"},
            body=b"{oops",
        )
        raw, errors = await extract_raw_facts(request, {}, with_body=True)
        assert raw.body is NOT_PROVIDED
        assert errors == (ValidationError(("body",), "Invalid JSON"),)

    def test_raw_facts_is_frozen(self) -> None:
        raw = RawFacts()
        with pytest.raises(AttributeError):
            raw.body = "x"  # type: ignore[misc]
