"""Built-in guards."""

from starlette_request_pipeline.guards.authentication import (
    APIKeyAuthentication,
    BearerAuthentication,
    CookieAuthentication,
)
from starlette_request_pipeline.guards.features import FeatureEnabled
from starlette_request_pipeline.guards.permissions import (
    Authenticated,
    HasPermission,
    HasRole,
)
from starlette_request_pipeline.guards.throttling import (
    InMemoryThrottleBackend,
    RateLimit,
    ThrottleBackend,
)

__all__ = [
    "APIKeyAuthentication",
    "Authenticated",
    "BearerAuthentication",
    "CookieAuthentication",
    "FeatureEnabled",
    "HasPermission",
    "HasRole",
    "InMemoryThrottleBackend",
    "RateLimit",
    "ThrottleBackend",
]
