"""Shared pytest fixtures for starlette-request-pipeline tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.validation import PydanticValidator


@pytest.fixture
def make_request() -> Any:
    """Factory for creating Starlette Request objects with an optional body."""

    def _make(
        method: str = "GET",
        path: str = "/",
        headers: dict[str, str] | None = None,
        query_string: str = "",
        body: bytes = b"",
        receive: Callable[[], Awaitable[dict[str, Any]]] | None = None,
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string.encode(),
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "root_path": "",
        }
        messages = [{"type": "http.request", "body": body, "more_body": False}]

        async def _receive() -> dict[str, Any]:
            if messages:
                return messages.pop(0)
            return {"type": "http.disconnect"}

        return Request(scope, receive or _receive)

    return _make


@pytest.fixture
def make_context(make_request: Any) -> Any:
    """Factory for RequestContext values around a fresh request."""

    def _make(
        locals: dict[str, Any] | None = None,
        request: Request | None = None,
        **request_kwargs: Any,
    ) -> RequestContext:
        return RequestContext(
            request=request or make_request(**request_kwargs),
            request_id="req-test",
            locals=locals or {},
        )

    return _make


@pytest.fixture
def validator() -> PydanticValidator:
    return PydanticValidator()


@pytest.fixture
def mock_decode() -> AsyncMock:
    """Mock async bearer token decode callback that returns a sample user dict."""
    mock = AsyncMock()
    mock.return_value = {"sub": "user-123", "email": "test@example.com"}
    return mock


@pytest.fixture
def mock_lookup() -> AsyncMock:
    """Mock async session lookup callback."""
    mock = AsyncMock()
    mock.return_value = {"id": "user-456", "name": "Cookie User"}
    return mock


@pytest.fixture
def mock_validate() -> AsyncMock:
    """Mock async API key validation callback."""
    mock = AsyncMock()
    mock.return_value = {"id": "service-789", "name": "API Service"}
    return mock


@pytest.fixture
def sample_user() -> dict[str, Any]:
    """Sample user dict for testing."""
    return {
        "sub": "user-123",
        "email": "test@example.com",
        "roles": ["admin", "user"],
        "permissions": ["tickets.read", "tickets.write", "users.delete"],
    }
