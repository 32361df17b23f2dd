from __future__ import annotations

import asyncio

import pytest

from fakes import FakeClock
from knowsynth.analysis import AnalysisCache, AnalysisTask, FanOutOrchestrator, error_marker, fan_out
from knowsynth.errors import BackendError


def _task(name, value=None, *, error=None, calls=None, **kwargs) -> AnalysisTask:
    async def run():
        if calls is not None:
            calls.append(name)
        await asyncio.sleep(0)
        if error is not None:
            raise error
        return value

    return AnalysisTask(name, run, **kwargs)


@pytest.mark.asyncio
async def test_failing_task_falls_back_without_hiding_siblings():
    orchestrator = FanOutOrchestrator(AnalysisCache())
    report = await orchestrator.run(
        "store_store/A",
        [
            _task("summary", ["doc one is about apples"], fallback=[]),
            _task("topics", error=BackendError("quota"), fallback=[]),
        ],
    )
    assert report == {"summary": ["doc one is about apples"], "topics": []}


@pytest.mark.asyncio
async def test_cache_hit_runs_no_task():
    calls: list[str] = []
    orchestrator = FanOutOrchestrator(AnalysisCache())
    first = await orchestrator.run("k", [_task("topics", ["a"], calls=calls)])
    second = await orchestrator.run("k", [_task("topics", ["b"], calls=calls)])
    assert first == second == {"topics": ["a"]}
    assert calls == ["topics"]


@pytest.mark.asyncio
async def test_use_cache_false_refreshes_and_overwrites():
    orchestrator = FanOutOrchestrator(AnalysisCache())
    await orchestrator.run("k", [_task("topics", ["a"])])
    refreshed = await orchestrator.run("k", [_task("topics", ["b"])], use_cache=False)
    assert refreshed == {"topics": ["b"]}
    assert orchestrator.lookup("k") == {"topics": ["b"]}


@pytest.mark.asyncio
async def test_degraded_report_is_cached_until_expiry():
    clock = FakeClock()
    orchestrator = FanOutOrchestrator(AnalysisCache(ttl_seconds=60, clock=clock))
    await orchestrator.run("k", [_task("topics", error=RuntimeError("down"), fallback=[])])
    assert orchestrator.lookup("k") == {"topics": []}
    clock.advance(61)
    assert orchestrator.lookup("k") is None


@pytest.mark.asyncio
async def test_error_marker_fallback_and_copied_fallbacks():
    shared: list[str] = []
    outcomes = await fan_out(
        [
            _task("insights", error=BackendError("bad key"), on_error=error_marker),
            _task("a", error=RuntimeError("x"), fallback=shared),
            _task("b", error=RuntimeError("y"), fallback=shared),
        ]
    )
    assert outcomes[0].payload == {"error": "bad key"}
    assert not outcomes[0].succeeded
    assert outcomes[1].payload is not outcomes[2].payload


@pytest.mark.asyncio
async def test_tasks_run_concurrently_and_merge_in_submission_order():
    started: list[str] = []
    release = asyncio.Event()

    async def slow():
        started.append("slow")
        await release.wait()
        return "slow"

    async def fast():
        started.append("fast")
        release.set()
        return "fast"

    outcomes = await fan_out([AnalysisTask("slow", slow), AnalysisTask("fast", fast)])
    assert started == ["slow", "fast"]
    assert [outcome.name for outcome in outcomes] == ["slow", "fast"]


@pytest.mark.asyncio
async def test_duplicate_task_names_rejected_before_running():
    calls: list[str] = []
    with pytest.raises(ValueError):
        await fan_out([_task("t", calls=calls), _task("t", calls=calls)])
    assert calls == []


@pytest.mark.asyncio
async def test_returned_report_is_a_copy():
    orchestrator = FanOutOrchestrator()
    report = await orchestrator.run("k", [_task("topics", ["a"])])
    report["topics"].append("mutated")
    assert orchestrator.lookup("k") == {"topics": ["a"]}


class BrokenCache:
    def get(self, key):
        raise OSError("cache storage unavailable")

    def put(self, key, report):
        raise OSError("cache storage unavailable")

    def invalidate(self, key=None):
        pass


@pytest.mark.asyncio
async def test_cache_layer_errors_propagate():
    orchestrator = FanOutOrchestrator(BrokenCache())
    with pytest.raises(OSError):
        await orchestrator.run("k", [_task("topics", ["a"])])


@pytest.mark.asyncio
async def test_failing_fallback_builder_uses_static_fallback():
    def broken_builder(exc):
        raise KeyError("fallback builder")

    outcomes = await fan_out(
        [
            _task("a", error=RuntimeError("down"), on_error=broken_builder, fallback=[]),
            _task("b", ["ok"]),
        ]
    )
    assert [(outcome.name, outcome.payload, outcome.succeeded) for outcome in outcomes] == [
        ("a", [], False),
        ("b", ["ok"], True),
    ]
