"""Guard chain executor."""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass

from starlette_request_pipeline.context import RequestContext
from starlette_request_pipeline.exceptions import GuardFailed
from starlette_request_pipeline.guard import Deny, GuardFn, normalize_result
from starlette_request_pipeline.hooks import PipelineHook
from starlette_request_pipeline.trace import PipelineTrace, guard_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardChainOutcome:
    """Context after the last guard that ran, plus the denial if one stopped the chain."""

    context: RequestContext
    denial: Deny | None = None

    @property
    def denied(self) -> bool:
        return self.denial is not None


async def run_guards(
    ctx: RequestContext,
    guards: Sequence[GuardFn],
    hooks: Sequence[PipelineHook] = (),
    trace: PipelineTrace | None = None,
) -> GuardChainOutcome:
    """Evaluate guards in order against the accumulated context.

    Runs whether or not ``ctx.input`` is valid. The first Deny ends the
    chain; each Allow layers its locals onto a new context.
    """
    for guard in guards:
        started = time.perf_counter()
        try:
            result = guard(ctx)
            if inspect.isawaitable(result):
                result = await result
            result = normalize_result(guard, result)
        except Exception as exc:
            if trace is not None:
                trace.record(guard_name(guard), started, "FAILED", reason=str(exc))
            raise GuardFailed(guard, ctx, cause=exc) from exc

        for hook in hooks:
            await hook.on_guard(ctx, guard, result)

        if isinstance(result, Deny):
            if trace is not None:
                trace.record(guard_name(guard), started, "DENIED")
            logger.debug(
                "Guard %s denied request %s", guard_name(guard), ctx.request_id
            )
            return GuardChainOutcome(context=ctx, denial=result)

        if trace is not None:
            trace.record(guard_name(guard), started, "OK")
        ctx = ctx.with_locals(result.locals)

    return GuardChainOutcome(context=ctx)
