"""Ordered rendering stages with first-success semantics and per-stage metrics."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import TotalRenderFailure
from .spec import SlideSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """A named rendering strategy. ``fn`` raises to signal failure."""

    name: str
    fn: Callable[[SlideSpec], Any]

    def __call__(self, spec: SlideSpec) -> Any:
        return self.fn(spec)


@dataclass(frozen=True)
class StageMetric:
    stage: str
    started_at: float
    duration_ms: float
    success: bool
    error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "stage": self.stage,
            "startedAt": self.started_at,
            "durationMs": round(self.duration_ms, 3),
            "success": self.success,
        }
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class RenderResult:
    success: bool
    stage: str
    metrics: List[StageMetric] = field(default_factory=list)
    total_duration_ms: float = 0.0
    output: Any = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "stage": self.stage,
            "totalDurationMs": round(self.total_duration_ms, 3),
            "metrics": [m.as_dict() for m in self.metrics],
        }


def first_success(stages: Sequence[Stage], spec: SlideSpec) -> RenderResult:
    """Run ``stages`` in order until one returns; record a metric per attempt.

    A stage that raises is recorded as failed and the next one is tried.
    When every stage fails, ``TotalRenderFailure`` carries the last error and
    the full metrics trail.
    """
    if not stages:
        raise ValueError("At least one rendering stage is required")

    started = time.perf_counter()
    metrics: List[StageMetric] = []
    last_error: Optional[BaseException] = None

    for index, stage in enumerate(stages):
        stage_wall = time.time()
        stage_start = time.perf_counter()
        logger.info("Attempting stage %r (%d/%d)", stage.name, index + 1, len(stages))
        try:
            output = stage(spec)
        except Exception as exc:
            duration = (time.perf_counter() - stage_start) * 1000
            metrics.append(StageMetric(stage.name, stage_wall, duration, False, f"{type(exc).__name__}: {exc}"))
            last_error = exc
            logger.warning("Stage %r failed after %.1fms: %s", stage.name, duration, exc)
            continue

        duration = (time.perf_counter() - stage_start) * 1000
        metrics.append(StageMetric(stage.name, stage_wall, duration, True))
        logger.info("Stage %r succeeded in %.1fms", stage.name, duration)
        return RenderResult(
            success=True,
            stage=stage.name,
            metrics=metrics,
            total_duration_ms=(time.perf_counter() - started) * 1000,
            output=output,
        )

    logger.error("All %d rendering stages failed; last error: %s", len(stages), last_error)
    raise TotalRenderFailure(last_error, metrics)


class RenderOrchestrator:
    """Holds an ordered stage list, most capable first, and renders specs through it."""

    def __init__(self, stages: Sequence[Stage]):
        if not stages:
            raise ValueError("At least one rendering stage is required")
        names = [s.name for s in stages]
        if len(set(names)) != len(names):
            raise ValueError(f"Stage names must be unique: {names}")
        self.stages = list(stages)
        self.tracker = MetricsTracker()

    @property
    def stage_names(self) -> List[str]:
        return [s.name for s in self.stages]

    def render(self, spec: SlideSpec) -> RenderResult:
        try:
            result = first_success(self.stages, spec)
        except TotalRenderFailure as exc:
            self.tracker.record(exc.metrics)
            raise
        self.tracker.record(result.metrics)
        return result


class MetricsTracker:
    """Accumulates stage metrics across renders."""

    def __init__(self) -> None:
        self.metrics: List[StageMetric] = []

    def record(self, metrics: Sequence[StageMetric]) -> None:
        self.metrics.extend(metrics)

    def summary(self) -> Dict[str, Any]:
        per_stage: Dict[str, Dict[str, Any]] = {}
        for m in self.metrics:
            entry = per_stage.setdefault(m.stage, {"attempts": 0, "successes": 0, "totalMs": 0.0})
            entry["attempts"] += 1
            entry["successes"] += int(m.success)
            entry["totalMs"] += m.duration_ms
        for entry in per_stage.values():
            entry["totalMs"] = round(entry["totalMs"], 3)
            entry["avgMs"] = round(entry["totalMs"] / entry["attempts"], 3)
        return {
            "totalStages": len(self.metrics),
            "totalMs": round(sum(m.duration_ms for m in self.metrics), 3),
            "stages": per_stage,
        }
