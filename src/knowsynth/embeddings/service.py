"""Embedding gateways for knowsynth."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import math
from dataclasses import dataclass
from typing import Protocol, Sequence, Tuple

from langchain_community.embeddings import HuggingFaceEmbeddings
from langchain_core.embeddings import Embeddings as LangChainEmbeddings

from knowsynth.backend import GeminiRestClient
from knowsynth.config import Settings
from knowsynth.errors import BackendError
from knowsynth.models import EmbeddingVector, TaskType

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmbeddingConfig:
    """Configuration for embedding gateways."""

    model: str = "text-embedding-004"
    dim: int = 768
    normalize: bool = True


class EmbeddingGateway(Protocol):
    """Protocol describing the embedding backend contract."""

    async def embed(self, text: str, task_type: TaskType = TaskType.QUERY) -> EmbeddingVector:
        """Return the embedding of a single text."""

    async def embed_batch(
        self,
        texts: Sequence[str],
        task_type: TaskType = TaskType.DOCUMENT,
    ) -> Sequence[EmbeddingVector]:
        """Return embeddings for ``texts`` in the same order."""


def _normalize(vector: Sequence[float]) -> Tuple[float, ...]:
    norm = math.sqrt(sum(value * value for value in vector)) or 1.0
    return tuple(value / norm for value in vector)


class HashEmbeddingGateway:
    """Deterministic lightweight embedding gateway used for testing and offline runs."""

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self._config = config or EmbeddingConfig()

    def _hash_to_vector(self, text: str) -> Tuple[float, ...]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        repeat = (self._config.dim + len(digest) - 1) // len(digest)
        raw = (digest * repeat)[: self._config.dim]
        vector = [byte / 255.0 for byte in raw]
        if self._config.normalize:
            return _normalize(vector)
        return tuple(vector)

    async def embed(self, text: str, task_type: TaskType = TaskType.QUERY) -> EmbeddingVector:
        return EmbeddingVector(values=self._hash_to_vector(text), task_type=task_type)

    async def embed_batch(
        self,
        texts: Sequence[str],
        task_type: TaskType = TaskType.DOCUMENT,
    ) -> Sequence[EmbeddingVector]:
        return [EmbeddingVector(values=self._hash_to_vector(text), task_type=task_type) for text in texts]


class LangChainEmbeddingGateway:
    """Gateway over any LangChain ``Embeddings`` implementation.

    LangChain already separates query and document embeddings, so the task type
    selects ``aembed_query`` or ``aembed_documents``.
    """

    def __init__(self, client: LangChainEmbeddings, config: EmbeddingConfig | None = None) -> None:
        self._client = client
        self._config = config or EmbeddingConfig()

    async def embed(self, text: str, task_type: TaskType = TaskType.QUERY) -> EmbeddingVector:
        try:
            if task_type is TaskType.QUERY:
                values = await self._client.aembed_query(text)
            else:
                values = (await self._client.aembed_documents([text]))[0]
        except Exception as exc:
            raise BackendError(f"Failed to get embedding: {exc}") from exc
        return EmbeddingVector(values=self._finish(values), task_type=task_type)

    async def embed_batch(
        self,
        texts: Sequence[str],
        task_type: TaskType = TaskType.DOCUMENT,
    ) -> Sequence[EmbeddingVector]:
        if not texts:
            return []
        try:
            if task_type is TaskType.DOCUMENT:
                vectors = await self._client.aembed_documents(list(texts))
            else:
                vectors = await asyncio.gather(*(self._client.aembed_query(text) for text in texts))
        except Exception as exc:
            raise BackendError(f"Failed to get batch embeddings: {exc}") from exc
        if len(vectors) != len(texts):
            LOGGER.error("Embedding backend returned %d vectors for %d texts", len(vectors), len(texts))
            raise BackendError("Mismatch between number of texts and embedding vectors")
        return [EmbeddingVector(values=self._finish(vector), task_type=task_type) for vector in vectors]

    def _finish(self, vector: Sequence[float]) -> Tuple[float, ...]:
        if self._config.normalize:
            return _normalize(vector)
        return tuple(float(value) for value in vector)


class GeminiEmbeddingGateway:
    """Gateway calling the ``embedContent`` / ``batchEmbedContents`` REST methods."""

    def __init__(self, client: GeminiRestClient, config: EmbeddingConfig | None = None) -> None:
        self._client = client
        self._config = config or EmbeddingConfig()

    @property
    def _model_path(self) -> str:
        return f"models/{self._config.model}"

    def _request(self, text: str, task_type: TaskType) -> dict[str, object]:
        return {
            "model": self._model_path,
            "content": {"parts": [{"text": text}]},
            "taskType": task_type.value,
        }

    async def embed(self, text: str, task_type: TaskType = TaskType.QUERY) -> EmbeddingVector:
        data = await self._client.post(
            f"{self._model_path}:embedContent",
            self._request(text, task_type),
            error_message="Failed to get embedding",
        )
        embedding = data.get("embedding")
        if not isinstance(embedding, dict) or not isinstance(embedding.get("values"), list):
            raise BackendError("Failed to get embedding: response carried no values")
        return EmbeddingVector(values=tuple(float(v) for v in embedding["values"]), task_type=task_type)

    async def embed_batch(
        self,
        texts: Sequence[str],
        task_type: TaskType = TaskType.DOCUMENT,
    ) -> Sequence[EmbeddingVector]:
        if not texts:
            return []
        data = await self._client.post(
            f"{self._model_path}:batchEmbedContents",
            {"requests": [self._request(text, task_type) for text in texts]},
            error_message="Failed to get batch embeddings",
        )
        embeddings = data.get("embeddings")
        if not isinstance(embeddings, list) or len(embeddings) != len(texts):
            raise BackendError("Failed to get batch embeddings: vector count does not match input")
        vectors: list[EmbeddingVector] = []
        for item in embeddings:
            values = item.get("values") if isinstance(item, dict) else None
            if not isinstance(values, list):
                raise BackendError("Failed to get batch embeddings: response carried no values")
            vectors.append(EmbeddingVector(values=tuple(float(v) for v in values), task_type=task_type))
        return vectors


def build_embedding_gateway(settings: Settings, *, rest_client: GeminiRestClient | None = None) -> EmbeddingGateway:
    """Return the embedding gateway selected by ``settings.embedding_provider``."""

    config = EmbeddingConfig(model=settings.embedding_model, dim=settings.embedding_dim)
    if settings.embedding_provider == "gemini":
        client = rest_client or GeminiRestClient(
            api_key=settings.google_api_key,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
        )
        return GeminiEmbeddingGateway(client, config)
    if settings.embedding_provider == "huggingface":
        model_kwargs = {"device": settings.huggingface_device} if settings.huggingface_device else {}
        client = HuggingFaceEmbeddings(
            model_name=settings.huggingface_model,
            model_kwargs=model_kwargs,
            encode_kwargs={"normalize_embeddings": True},
        )
        LOGGER.info("Loaded embedding model %s", settings.huggingface_model)
        return LangChainEmbeddingGateway(client, config)
    LOGGER.info("Embedding gateway running in hash-only mode.")
    return HashEmbeddingGateway(config)
