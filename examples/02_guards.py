"""
Guards example of starlette-request-pipeline on a FastAPI app.

Demonstrates:
- Built-in authentication, role and rate limit guards
- Group guards running before each route's own guards
- A function guard contributing locals for the handler
- Request hooks, a custom fault handler and debug traces
"""

import logging

from fastapi import FastAPI
from starlette.responses import JSONResponse, PlainTextResponse

from starlette_request_pipeline import (
    Allow,
    BearerAuthentication,
    BeforeRequest,
    ErrorContext,
    Group,
    HasRole,
    PipelineConfig,
    RateLimit,
    RequestContext,
    include_routes,
    route,
)

logging.basicConfig(level=logging.DEBUG)

app = FastAPI(title="Guards Example")

USERS = {
    "admin-token": {"sub": "alice", "roles": ["admin", "user"]},
    "user-token": {"sub": "bob", "roles": ["user"]},
}


async def decode_token(token: str) -> dict:
    """Look up a user by token (replace with real JWT decoding)."""
    return USERS.get(token)


async def tenant_from_header(request) -> dict:
    return {"tenant": request.headers.get("x-tenant", "default")}


async def load_quota(ctx: RequestContext):
    """Function guards may return Allow with extra locals."""
    return Allow({"quota": 100 if "admin" in ctx.locals["user"]["roles"] else 10})


async def on_error(err: ErrorContext):
    return JSONResponse(
        {"error": "internal", "request_id": err.request_id}, status_code=500
    )


async def profile(ctx: RequestContext):
    return JSONResponse(
        {
            "user": ctx.locals["user"]["sub"],
            "tenant": ctx.locals["tenant"],
            "quota": ctx.locals["quota"],
        }
    )


async def stats(ctx: RequestContext):
    return JSONResponse({"users": len(USERS)})


async def crash(ctx: RequestContext):
    raise RuntimeError("this detail never reaches the client")


authenticated = Group(
    route.get("/me", profile, guards=[load_quota]),
    Group(route.get("/admin/stats", stats), guards=[HasRole("admin")]),
    guards=[BearerAuthentication(decode_token), RateLimit(rate=5, window_seconds=60)],
)

include_routes(
    app,
    authenticated,
    route.get("/", lambda ctx: PlainTextResponse("public")),
    route.get("/crash", crash),
    config=PipelineConfig(
        hooks=[BeforeRequest(tenant_from_header)],
        on_error=on_error,
        debug=True,
    ),
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

    # Test with:
    # curl http://localhost:8000/me                                        # 401
    # curl -H "Authorization: Bearer user-token" http://localhost:8000/me
    # curl -H "Authorization: Bearer user-token" http://localhost:8000/admin/stats  # 403
    # curl -H "Authorization: Bearer admin-token" http://localhost:8000/admin/stats
    # curl -H "X-Request-ID: abc" http://localhost:8000/crash               # 500
