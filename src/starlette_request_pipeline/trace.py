"""PipelineTrace and TraceEntry for debug execution recording."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Literal

StageOutcome = Literal["OK", "INVALID", "DENIED", "FAILED"]


@dataclass(frozen=True)
class TraceEntry:
    """Single stage execution record."""

    stage: str
    duration_ms: float
    outcome: StageOutcome
    reason: str | None = None


@dataclass
class PipelineTrace:
    """Structured record of a single pipeline run."""

    entries: list[TraceEntry] = field(default_factory=list)
    total_duration_ms: float = 0.0
    outcome: Literal["OK", "DENIED", "ERROR"] = "OK"
    error: Exception | None = None
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def record(
        self,
        stage: str,
        started: float,
        outcome: StageOutcome,
        *,
        reason: str | None = None,
    ) -> None:
        elapsed = (time.perf_counter() - started) * 1000
        self.entries.append(TraceEntry(stage, elapsed, outcome, reason))

    def finish(
        self,
        outcome: Literal["OK", "DENIED", "ERROR"],
        error: Exception | None = None,
    ) -> None:
        self.total_duration_ms = (time.perf_counter() - self._started) * 1000
        self.outcome = outcome
        self.error = error


def guard_name(guard: object) -> str:
    return getattr(guard, "__name__", type(guard).__name__)
