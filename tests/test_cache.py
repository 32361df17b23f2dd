from __future__ import annotations

import pytest

from fakes import FakeClock
from knowsynth.analysis import AnalysisCache, make_cache_key


def test_hit_before_ttl_and_miss_after():
    clock = FakeClock()
    cache = AnalysisCache(ttl_seconds=3600, clock=clock)
    cache.put("store_A", {"topics": ["x"]})

    clock.advance(3599)
    assert cache.get("store_A") == {"topics": ["x"]}
    clock.advance(1)
    assert cache.get("store_A") == {"topics": ["x"]}
    clock.advance(0.5)
    assert cache.get("store_A") is None


def test_missing_key_is_a_miss():
    assert AnalysisCache().get("store_unknown") is None


def test_put_replaces_and_resets_timestamp():
    clock = FakeClock()
    cache = AnalysisCache(ttl_seconds=10, clock=clock)
    cache.put("k", {"v": 1})
    clock.advance(8)
    cache.put("k", {"v": 2})
    clock.advance(8)
    assert cache.get("k") == {"v": 2}
    assert cache.entry("k").created_at == 1008


def test_callers_never_share_state_with_cache():
    cache = AnalysisCache()
    report = {"topics": ["x"]}
    cache.put("k", report)
    report["topics"].append("mutated")
    fetched = cache.get("k")
    fetched["topics"].append("also mutated")
    assert cache.get("k") == {"topics": ["x"]}


def test_invalidate_one_or_all():
    cache = AnalysisCache()
    cache.put("a", {})
    cache.put("b", {})
    cache.invalidate("a")
    assert "a" not in cache
    assert "b" in cache
    cache.invalidate()
    assert len(cache) == 0


def test_negative_ttl_rejected():
    with pytest.raises(ValueError):
        AnalysisCache(ttl_seconds=-1)


def test_cache_keys():
    assert make_cache_key("fileSearchStores/abc") == "store_fileSearchStores/abc"
    assert make_cache_key(["b", "a", "b"]) == "stores_a|b"
    assert make_cache_key(["only"]) == "store_only"
    with pytest.raises(ValueError):
        make_cache_key([])


def test_expired_entries_are_evicted_on_read():
    clock = FakeClock()
    cache = AnalysisCache(ttl_seconds=10, clock=clock)
    for name in ("a", "b", "c"):
        cache.put(f"store_{name}", {"topics": [name]})
    clock.advance(11)
    assert [cache.get(f"store_{name}") for name in ("a", "b", "c")] == [None, None, None]
    assert len(cache) == 0
