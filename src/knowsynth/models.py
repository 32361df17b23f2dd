"""Shared domain models used across the knowsynth layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence

AnalysisReport = Dict[str, Any]


class TaskType(str, Enum):
    """Embedding task type understood by the embedding backend."""

    QUERY = "RETRIEVAL_QUERY"
    DOCUMENT = "RETRIEVAL_DOCUMENT"


@dataclass(frozen=True)
class EmbeddingVector:
    """Embedding values tagged with the task type that produced them."""

    values: tuple[float, ...]
    task_type: TaskType

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class ScoredChunk:
    """Chunk of grounding text, optionally annotated with a relevance score.

    ``relevance_score`` is only set after re-ranking; ``None`` means re-ranking
    was skipped or failed, in which case ``reranking_error`` explains why.
    """

    title: str
    text: str
    source_collection: str = ""
    relevance_score: float | None = None
    reranking_error: str | None = None

    @property
    def embedding_text(self) -> str:
        if self.title and self.text:
            return f"{self.title}: {self.text}"
        return self.text or self.title or ""


@dataclass(frozen=True)
class Answer:
    """Generated answer with re-ranked citations."""

    text: str
    citations: Sequence[ScoredChunk]
    query_id: str
    latency_ms: float
    generation_ms: float | None = None
    rerank_ms: float | None = None
