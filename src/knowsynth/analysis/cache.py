"""Time-boxed cache for analysis reports."""

from __future__ import annotations

import copy
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Protocol, Sequence, Union

from knowsynth.metrics.observability import PipelineMetrics, get_logger
from knowsynth.models import AnalysisReport

DEFAULT_TTL_SECONDS = 60 * 60


def make_cache_key(collections: Union[str, Sequence[str]]) -> str:
    """Deterministic key for one collection name or a set of names."""

    if isinstance(collections, str):
        return f"store_{collections}"
    names = sorted({name for name in collections if name})
    if not names:
        raise ValueError("At least one collection name is required")
    if len(names) == 1:
        return f"store_{names[0]}"
    return "stores_" + "|".join(names)


@dataclass(frozen=True)
class CacheEntry:
    key: str
    payload: AnalysisReport
    created_at: float


class ReportCache(Protocol):
    """Interface the orchestrator needs from a report cache."""

    def get(self, key: str) -> AnalysisReport | None:
        """Return a copy of the cached report, or ``None`` on a miss."""

    def put(self, key: str, report: AnalysisReport) -> None:
        """Store ``report`` under ``key``, replacing any previous entry."""

    def invalidate(self, key: str | None = None) -> None:
        """Drop one entry, or every entry when ``key`` is ``None``."""


class AnalysisCache:
    """In-memory report cache with lazy TTL expiry.

    An entry is a hit while ``clock() - created_at <= ttl_seconds``; expired
    entries are evicted when read rather than swept. Reports are deep-copied on
    the way in and out so callers never share state with the cache.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._logger = get_logger("analysis.cache")

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> AnalysisReport | None:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            PipelineMetrics.observe_cache("miss")
            return None
        if self._clock() - entry.created_at > self._ttl:
            with self._lock:
                # a concurrent put may have replaced the entry since the read
                if self._entries.get(key) is entry:
                    del self._entries[key]
            PipelineMetrics.observe_cache("expired")
            self._logger.debug("cache.expired", key=key)
            return None
        PipelineMetrics.observe_cache("hit")
        return copy.deepcopy(entry.payload)

    def entry(self, key: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, report: AnalysisReport) -> None:
        entry = CacheEntry(key=key, payload=copy.deepcopy(report), created_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        self._logger.debug("cache.put", key=key, sections=sorted(report))

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        self._logger.info("cache.invalidated", key=key or "*")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


__all__ = ["AnalysisCache", "CacheEntry", "DEFAULT_TTL_SECONDS", "ReportCache", "make_cache_key"]
