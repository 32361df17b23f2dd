from __future__ import annotations

from knowsynth.config import get_settings


def test_defaults_embedding_model_and_dim():
    settings = get_settings({})
    assert settings.embedding_provider == "hash"
    assert settings.embedding_model == "text-embedding-004"
    assert settings.embedding_dim == 768


def test_rerank_and_cache_defaults():
    settings = get_settings({})
    assert settings.rerank_top_k == 5
    assert settings.rerank_min_relevance_score == 0.3
    assert settings.analysis_cache_ttl_seconds == 3600
    assert settings.request_timeout_seconds is None


def test_override_builds_fresh_settings():
    overridden = get_settings({"environment": "test", "generation_provider": "gemini"})
    assert overridden.is_test
    assert overridden.uses_remote_backend


def test_environment_variables_use_prefix(monkeypatch):
    monkeypatch.setenv("KNOWSYNTH_RERANK_TOP_K", "9")
    monkeypatch.setenv("KNOWSYNTH_EMBEDDING_PROVIDER", "gemini")
    settings = get_settings({"environment": "test"})
    assert settings.rerank_top_k == 9
    assert settings.embedding_provider == "gemini"
