"""Fan-out/fan-in coordination of independent analysis calls."""

from __future__ import annotations

import asyncio
import copy
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence

from knowsynth.analysis.cache import AnalysisCache, ReportCache
from knowsynth.metrics.observability import PipelineMetrics, TimedSection, get_logger
from knowsynth.models import AnalysisReport

LOGGER = get_logger("analysis.orchestrator")


@dataclass(frozen=True)
class AnalysisTask:
    """Named unit of work with the value to use when it fails.

    ``on_error`` receives the exception and builds the fallback (for example an
    ``{"error": ...}`` marker); otherwise a copy of ``fallback`` is used.
    """

    name: str
    run: Callable[[], Awaitable[Any]]
    fallback: Any = None
    on_error: Callable[[Exception], Any] | None = None

    def fallback_for(self, exc: Exception) -> Any:
        if self.on_error is not None:
            try:
                return self.on_error(exc)
            except Exception as builder_exc:
                LOGGER.warning(
                    "analysis.fallback_builder_failed",
                    task=self.name,
                    error=str(builder_exc),
                    error_type=type(builder_exc).__name__,
                )
        return copy.deepcopy(self.fallback)


@dataclass(frozen=True)
class TaskOutcome:
    name: str
    payload: Any
    succeeded: bool
    error: str | None = None


def error_marker(exc: Exception) -> dict[str, str]:
    return {"error": str(exc)}


async def _settle(task: AnalysisTask) -> TaskOutcome:
    try:
        payload = await task.run()
    except Exception as exc:
        PipelineMetrics.observe_task(task.name, "fallback")
        LOGGER.warning("analysis.task_failed", task=task.name, error=str(exc), error_type=type(exc).__name__)
        return TaskOutcome(name=task.name, payload=task.fallback_for(exc), succeeded=False, error=str(exc))
    PipelineMetrics.observe_task(task.name, "success")
    return TaskOutcome(name=task.name, payload=payload, succeeded=True)


async def fan_out(tasks: Sequence[AnalysisTask]) -> list[TaskOutcome]:
    """Start every task at once and wait for all of them to settle.

    A failing task settles with its fallback; siblings are unaffected. Outcomes
    are returned in submission order regardless of completion order.
    """

    names = [task.name for task in tasks]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate analysis task names: {duplicates}")
    if not tasks:
        return []
    return list(await asyncio.gather(*(_settle(task) for task in tasks)))


def merge_outcomes(outcomes: Sequence[TaskOutcome]) -> AnalysisReport:
    return {outcome.name: outcome.payload for outcome in outcomes}


class FanOutOrchestrator:
    """Run analysis tasks concurrently and cache the merged report by key."""

    def __init__(self, cache: ReportCache | None = None) -> None:
        self._cache = cache if cache is not None else AnalysisCache()

    @property
    def cache(self) -> ReportCache:
        return self._cache

    def lookup(self, key: str) -> AnalysisReport | None:
        return self._cache.get(key)

    async def run(self, key: str, tasks: Sequence[AnalysisTask], *, use_cache: bool = True) -> AnalysisReport:
        """Return the report for ``key``, from cache or from a fresh fan-out pass.

        The merged report is cached even when some sections fell back. There is
        no retry here; callers re-run with ``use_cache=False`` to refresh.
        """

        if use_cache:
            cached = self._cache.get(key)
            if cached is not None:
                LOGGER.info("analysis.cache_hit", key=key)
                return cached
        with TimedSection(PipelineMetrics.observe_orchestration) as timer:
            outcomes = await fan_out(tasks)
            report = merge_outcomes(outcomes)
            self._cache.put(key, report)
        LOGGER.info(
            "analysis.complete",
            key=key,
            tasks=len(outcomes),
            degraded=[outcome.name for outcome in outcomes if not outcome.succeeded],
            duration_seconds=timer.duration_seconds,
        )
        return copy.deepcopy(report)

    def invalidate(self, key: str | None = None) -> None:
        self._cache.invalidate(key)


__all__ = [
    "AnalysisTask",
    "FanOutOrchestrator",
    "TaskOutcome",
    "error_marker",
    "fan_out",
    "merge_outcomes",
]
