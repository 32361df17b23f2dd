"""Semantic re-ranking of grounding chunks."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Sequence

from knowsynth.embeddings.scoring import cosine_similarity
from knowsynth.embeddings.service import EmbeddingGateway
from knowsynth.metrics.observability import PipelineMetrics, get_logger
from knowsynth.models import ScoredChunk, TaskType


@dataclass(frozen=True)
class RerankConfig:
    """Default options for re-ranking."""

    top_k: int = 5
    min_relevance_score: float = 0.3


class Reranker:
    """Reorder and filter retrieved chunks by embedding similarity to the query."""

    def __init__(self, gateway: EmbeddingGateway, config: RerankConfig | None = None) -> None:
        self._gateway = gateway
        self._config = config or RerankConfig()
        self._logger = get_logger("rerank")

    async def rerank(
        self,
        query: str,
        chunks: Sequence[ScoredChunk],
        *,
        top_k: int | None = None,
        min_relevance_score: float | None = None,
    ) -> list[ScoredChunk]:
        """Return ``chunks`` scored against ``query``, best first.

        Embedding failures never propagate: the original order is returned,
        truncated to ``top_k``, with ``relevance_score=None``.
        """

        if not chunks:
            return []
        limit = self._config.top_k if top_k is None else top_k
        threshold = self._config.min_relevance_score if min_relevance_score is None else min_relevance_score
        start = time.perf_counter()
        try:
            query_vector, chunk_vectors = await asyncio.gather(
                self._gateway.embed(query, TaskType.QUERY),
                self._gateway.embed_batch([chunk.embedding_text for chunk in chunks], TaskType.DOCUMENT),
            )
        except Exception as exc:
            PipelineMetrics.observe_rerank_degraded()
            self._logger.warning("rerank.degraded", chunk_count=len(chunks), error=str(exc))
            return [replace(chunk, relevance_score=None, reranking_error=str(exc)) for chunk in chunks[:limit]]

        scored = [
            replace(chunk, relevance_score=cosine_similarity(query_vector.values, vector.values), reranking_error=None)
            for chunk, vector in zip(chunks, chunk_vectors)
        ]
        if len(scored) > 1:
            # sorted() is stable, equal scores keep retrieval order
            scored = sorted(scored, key=lambda chunk: chunk.relevance_score, reverse=True)
            kept = [chunk for chunk in scored if chunk.relevance_score >= threshold][:limit]
        else:
            kept = [chunk for chunk in scored if chunk.relevance_score >= threshold]
        duration = time.perf_counter() - start
        PipelineMetrics.observe_rerank(duration, (chunk.relevance_score for chunk in kept))
        self._logger.info(
            "rerank.complete",
            chunk_count=len(chunks),
            kept=len(kept),
            top_k=limit,
            min_relevance_score=threshold,
            duration_seconds=duration,
        )
        return kept

    async def calculate_relevance(self, query: str, document_text: str) -> float:
        """Embed both texts and return their cosine similarity; errors propagate."""

        query_vector, document_vector = await asyncio.gather(
            self._gateway.embed(query, TaskType.QUERY),
            self._gateway.embed(document_text, TaskType.DOCUMENT),
        )
        return cosine_similarity(query_vector.values, document_vector.values)


__all__ = ["RerankConfig", "Reranker"]
