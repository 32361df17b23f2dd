from __future__ import annotations

import json

import httpx
import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from fakes import norm
from knowsynth.backend import GeminiRestClient
from knowsynth.config import Settings
from knowsynth.embeddings import (
    EmbeddingConfig,
    GeminiEmbeddingGateway,
    HashEmbeddingGateway,
    LangChainEmbeddingGateway,
    build_embedding_gateway,
)
from knowsynth.errors import BackendError
from knowsynth.models import TaskType


@pytest.mark.asyncio
async def test_hash_embedding_dim_matches_config():
    gateway = HashEmbeddingGateway(EmbeddingConfig(dim=64))
    vector = await gateway.embed("hello world")
    assert len(vector) == 64
    assert vector.task_type is TaskType.QUERY
    assert norm(vector.values) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_hash_embedding_batch_preserves_order():
    gateway = HashEmbeddingGateway(EmbeddingConfig(dim=32))
    batch = await gateway.embed_batch(["alpha", "beta"], TaskType.DOCUMENT)
    assert [v.values for v in batch] == [(await gateway.embed("alpha")).values, (await gateway.embed("beta")).values]
    assert all(v.task_type is TaskType.DOCUMENT for v in batch)


@pytest.mark.asyncio
async def test_langchain_gateway_wraps_fake_embeddings():
    gateway = LangChainEmbeddingGateway(DeterministicFakeEmbedding(size=16), EmbeddingConfig(dim=16))
    single = await gateway.embed("apples", TaskType.QUERY)
    batch = await gateway.embed_batch(["apples", "cars"], TaskType.DOCUMENT)
    assert len(single) == 16
    assert len(batch) == 2
    assert batch[0].values == pytest.approx(single.values)


class BrokenEmbeddings(DeterministicFakeEmbedding):
    def embed_documents(self, texts):
        raise RuntimeError("model unavailable")


@pytest.mark.asyncio
async def test_langchain_gateway_raises_backend_error():
    gateway = LangChainEmbeddingGateway(BrokenEmbeddings(size=8))
    with pytest.raises(BackendError, match="model unavailable"):
        await gateway.embed_batch(["x"], TaskType.DOCUMENT)


def _gemini_gateway(handler) -> tuple[GeminiEmbeddingGateway, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = GeminiRestClient(
        api_key="secret",
        base_url="https://example.test/v1beta",
        client=httpx.AsyncClient(transport=httpx.MockTransport(record)),
    )
    return GeminiEmbeddingGateway(client, EmbeddingConfig(model="text-embedding-004")), seen


@pytest.mark.asyncio
async def test_gemini_gateway_single_and_batch_requests():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if request.url.path.endswith(":embedContent"):
            return httpx.Response(200, json={"embedding": {"values": [0.1, 0.2, 0.3]}})
        return httpx.Response(200, json={"embeddings": [{"values": [float(i)] * 3} for i, _ in enumerate(body["requests"])]})

    gateway, seen = _gemini_gateway(handler)
    query = await gateway.embed("fruit", TaskType.QUERY)
    docs = await gateway.embed_batch(["a", "b"], TaskType.DOCUMENT)

    assert query.values == (0.1, 0.2, 0.3)
    assert [d.values for d in docs] == [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0)]
    assert seen[0].url.path == "/v1beta/models/text-embedding-004:embedContent"
    assert seen[0].url.params["key"] == "secret"
    first = json.loads(seen[0].content)
    assert first["taskType"] == "RETRIEVAL_QUERY"
    assert first["content"] == {"parts": [{"text": "fruit"}]}
    batch = json.loads(seen[1].content)
    assert [item["taskType"] for item in batch["requests"]] == ["RETRIEVAL_DOCUMENT", "RETRIEVAL_DOCUMENT"]


@pytest.mark.asyncio
async def test_gemini_gateway_surfaces_backend_message():
    gateway, _ = _gemini_gateway(
        lambda request: httpx.Response(429, json={"error": {"message": "Resource has been exhausted"}})
    )
    with pytest.raises(BackendError) as excinfo:
        await gateway.embed("fruit")
    assert str(excinfo.value) == "Resource has been exhausted"
    assert excinfo.value.status_code == 429


@pytest.mark.asyncio
async def test_gemini_gateway_rejects_short_batch():
    gateway, _ = _gemini_gateway(lambda request: httpx.Response(200, json={"embeddings": [{"values": [1.0]}]}))
    with pytest.raises(BackendError):
        await gateway.embed_batch(["a", "b"])


@pytest.mark.asyncio
async def test_empty_batch_makes_no_request():
    gateway, seen = _gemini_gateway(lambda request: httpx.Response(500))
    assert await gateway.embed_batch([]) == []
    assert seen == []


def test_build_embedding_gateway_selects_provider():
    assert isinstance(build_embedding_gateway(Settings(environment="test")), HashEmbeddingGateway)
    gemini = build_embedding_gateway(Settings(environment="test", embedding_provider="gemini", google_api_key="k"))
    assert isinstance(gemini, GeminiEmbeddingGateway)
