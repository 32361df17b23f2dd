"""Observability helpers for knowsynth."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from typing import Iterable

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False
_correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")


def configure_logging(level: int = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()
    _correlation_id_var.set("-")


def get_correlation_id() -> str:
    return _correlation_id_var.get()


def get_logger(name: str = "knowsynth") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def _clamp_score(score: float) -> float:
    if score < -1.0:
        return -1.0
    if score > 1.0:
        return 1.0
    return score


class PipelineMetrics:
    """Prometheus metrics for re-ranking, extraction and orchestration."""

    rerank_latency = Histogram(
        "knowsynth_rerank_duration_seconds",
        "Time spent re-ranking grounding chunks.",
        buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    )
    rerank_chunk_count = Histogram(
        "knowsynth_rerank_chunk_count",
        "Chunks kept after re-ranking.",
        buckets=(0, 1, 2, 3, 5, 8, 13),
    )
    relevance_score = Histogram(
        "knowsynth_relevance_score",
        "Cosine relevance of re-ranked chunks.",
        buckets=(-0.5, 0.0, 0.25, 0.3, 0.5, 0.75, 1.0),
    )
    rerank_degraded = Counter(
        "knowsynth_rerank_degraded_total",
        "Re-rank calls that fell back to the original retrieval order.",
    )
    cache_lookups = Counter(
        "knowsynth_analysis_cache_lookups_total",
        "Analysis cache lookups by result.",
        ["result"],
    )
    task_outcomes = Counter(
        "knowsynth_analysis_task_outcomes_total",
        "Fan-out task outcomes by task name.",
        ["task", "outcome"],
    )
    orchestration_latency = Histogram(
        "knowsynth_orchestration_duration_seconds",
        "Time spent in one fan-out/fan-in pass.",
        buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
    )
    extraction_strategy = Counter(
        "knowsynth_extraction_sections_total",
        "Extracted report sections by the strategy that filled them.",
        ["strategy"],
    )

    @classmethod
    def observe_rerank(cls, duration_seconds: float, scores: Iterable[float]) -> None:
        cls.rerank_latency.observe(duration_seconds)
        kept = 0
        for score in scores:
            kept += 1
            cls.relevance_score.observe(_clamp_score(score))
        cls.rerank_chunk_count.observe(kept)

    @classmethod
    def observe_rerank_degraded(cls) -> None:
        cls.rerank_degraded.inc()

    @classmethod
    def observe_cache(cls, result: str) -> None:
        cls.cache_lookups.labels(result=result).inc()

    @classmethod
    def observe_task(cls, task: str, outcome: str) -> None:
        cls.task_outcomes.labels(task=task, outcome=outcome).inc()

    @classmethod
    def observe_orchestration(cls, duration_seconds: float) -> None:
        cls.orchestration_latency.observe(duration_seconds)

    @classmethod
    def observe_extraction(cls, strategy: str) -> None:
        cls.extraction_strategy.labels(strategy=strategy).inc()


class TimedSection:
    """Context manager reporting elapsed seconds to ``callback`` on successful exit.

    ``duration_seconds`` stays readable after the block for log fields.
    """

    def __init__(self, callback) -> None:
        self._callback = callback
        self._start = 0.0
        self.duration_seconds = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        self.duration_seconds = time.perf_counter() - self._start
        if exc_type is None:
            self._callback(self.duration_seconds)


__all__ = [
    "PipelineMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_correlation_id",
    "get_logger",
]
