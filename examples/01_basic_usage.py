"""
Basic usage example of starlette-request-pipeline.

Demonstrates:
- Declaring body and params schemas on a route
- Inspecting validated input (or its errors) inside the handler
- Serving the route table as a standalone ASGI app
"""

from pydantic import BaseModel
from starlette.responses import JSONResponse

from starlette_request_pipeline import (
    PipelineApp,
    PipelineConfig,
    PydanticValidator,
    RequestContext,
    failure,
    route,
    success,
)


class NewTicket(BaseModel):
    title: str
    priority: int = 3


class ProjectParams(BaseModel):
    project_id: int


async def create_ticket(ctx: RequestContext):
    """Invalid input is a value: the handler decides how to report it."""
    if not ctx.input.ok:
        errors = [{"path": list(e.path), "message": e.message} for e in ctx.input.errors]
        return failure(JSONResponse({"errors": errors}, status_code=422))

    ticket = ctx.input.body
    return success(
        JSONResponse(
            {
                "project": ctx.input.params.project_id,
                "title": ticket.title,
                "priority": ticket.priority,
            },
            status_code=201,
        )
    )


async def search(ctx: RequestContext):
    """No schema declared: raw query values are still available."""
    return JSONResponse({"query": ctx.raw.query, "request_id": ctx.request_id})


app = PipelineApp(
    route.post(
        "/projects/{project_id}/tickets",
        create_ticket,
        body=NewTicket,
        params=ProjectParams,
    ),
    route.get("/search", search),
    config=PipelineConfig(validator=PydanticValidator()),
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

    # Test with:
    # curl -X POST -H "Content-Type: application/json" -d '{"title": "Bug"}' \
    #     http://localhost:8000/projects/1/tickets
    # curl -X POST -H "Content-Type: application/json" -d '{"priority": "high"}' \
    #     http://localhost:8000/projects/abc/tickets
    # curl "http://localhost:8000/search?tag=a&tag=b&page=2"
