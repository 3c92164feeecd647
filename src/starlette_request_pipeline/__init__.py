"""Starlette Request Pipeline - validated input, guard chains and one error boundary for ASGI routes."""

from starlette_request_pipeline import route
from starlette_request_pipeline.app import PipelineApp
from starlette_request_pipeline.chain import GuardChainOutcome, run_guards
from starlette_request_pipeline.config import ErrorContext, PipelineConfig
from starlette_request_pipeline.context import RequestContext, merge_locals
from starlette_request_pipeline.exceptions import (
    ConfigurationError,
    GuardFailed,
    InvalidGuardResult,
    InvalidHandlerResult,
    PipelineException,
)
from starlette_request_pipeline.extraction import RawFacts, parse_query
from starlette_request_pipeline.group import Group
from starlette_request_pipeline.guard import Allow, Deny, Guard, allow, deny
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
from starlette_request_pipeline.hooks import (
    AfterGuard,
    AfterResponse,
    BeforeRequest,
    PipelineHook,
)
from starlette_request_pipeline.integration import include_routes, route_endpoint
from starlette_request_pipeline.route import ResolveResult, Route, failure, success
from starlette_request_pipeline.router import Router, RouteMatch
from starlette_request_pipeline.trace import PipelineTrace, TraceEntry
from starlette_request_pipeline.validation import (
    NOT_PROVIDED,
    InputSchemas,
    InvalidInput,
    ParseFailure,
    ParseSuccess,
    PydanticValidator,
    ValidationError,
    ValidatorAdapter,
    ValidInput,
)

__all__ = [
    "APIKeyAuthentication",
    "AfterGuard",
    "AfterResponse",
    "Allow",
    "Authenticated",
    "BearerAuthentication",
    "BeforeRequest",
    "ConfigurationError",
    "CookieAuthentication",
    "Deny",
    "ErrorContext",
    "FeatureEnabled",
    "Group",
    "Guard",
    "GuardChainOutcome",
    "GuardFailed",
    "HasPermission",
    "HasRole",
    "InMemoryThrottleBackend",
    "InputSchemas",
    "InvalidGuardResult",
    "InvalidHandlerResult",
    "InvalidInput",
    "NOT_PROVIDED",
    "ParseFailure",
    "ParseSuccess",
    "PipelineApp",
    "PipelineConfig",
    "PipelineException",
    "PipelineHook",
    "PipelineTrace",
    "PydanticValidator",
    "RateLimit",
    "RawFacts",
    "RequestContext",
    "ResolveResult",
    "Route",
    "RouteMatch",
    "Router",
    "ThrottleBackend",
    "TraceEntry",
    "ValidInput",
    "ValidationError",
    "ValidatorAdapter",
    "allow",
    "deny",
    "failure",
    "include_routes",
    "merge_locals",
    "parse_query",
    "route",
    "route_endpoint",
    "run_guards",
    "success",
]
