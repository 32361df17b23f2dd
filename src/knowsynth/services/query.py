"""Question answering over document collections with re-ranked citations."""

from __future__ import annotations

import time
from typing import Sequence
from uuid import NAMESPACE_URL, uuid5

from knowsynth.metrics.observability import get_logger
from knowsynth.models import Answer, ScoredChunk
from knowsynth.retrieval.reranker import Reranker
from knowsynth.services.generation import (
    ChatTurn,
    GenerationBackend,
    StoreNames,
    as_store_list,
    grounding_chunks,
    response_text,
)

NO_RESPONSE_TEXT = "No response generated."


class KnowledgeQueryService:
    """Ask the generation backend and re-rank the grounding chunks it cites."""

    def __init__(self, generator: GenerationBackend, reranker: Reranker) -> None:
        self._generator = generator
        self._reranker = reranker
        self._logger = get_logger("query")

    async def ask(
        self,
        store_names: StoreNames,
        question: str,
        history: Sequence[ChatTurn] = (),
        *,
        top_k: int | None = None,
        min_relevance_score: float | None = None,
    ) -> Answer:
        start = time.perf_counter()
        response = await self._generator.generate(store_names, question, history)
        generation_duration = time.perf_counter() - start
        text = response_text(response) or NO_RESPONSE_TEXT
        chunks = self._dedupe_chunks(grounding_chunks(response))
        self._logger.info(
            "generation.complete",
            stores=as_store_list(store_names),
            chunk_count=len(chunks),
            duration_seconds=generation_duration,
        )
        rerank_start = time.perf_counter()
        citations = await self._reranker.rerank(
            question,
            chunks,
            top_k=top_k,
            min_relevance_score=min_relevance_score,
        )
        rerank_duration = time.perf_counter() - rerank_start
        latency_ms = (time.perf_counter() - start) * 1000
        query_id = uuid5(NAMESPACE_URL, question).hex
        return Answer(
            text=text,
            citations=citations,
            query_id=query_id,
            latency_ms=latency_ms,
            generation_ms=generation_duration * 1000,
            rerank_ms=rerank_duration * 1000,
        )

    @staticmethod
    def _dedupe_chunks(chunks: Sequence[ScoredChunk]) -> list[ScoredChunk]:
        seen: set[tuple[str, str, str]] = set()
        ordered: list[ScoredChunk] = []
        for chunk in chunks:
            identity = (chunk.source_collection, chunk.title, chunk.text)
            if identity in seen:
                continue
            seen.add(identity)
            ordered.append(chunk)
        return ordered
