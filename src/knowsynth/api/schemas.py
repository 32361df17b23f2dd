"""Pydantic models for the knowsynth API."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

NonEmptyName = Annotated[str, Field(min_length=1)]


class ChunkModel(BaseModel):
    title: str = Field(default="", description="Title of the grounding chunk")
    text: str = Field(default="", description="Body text of the grounding chunk")
    source_collection: str = Field(default="", description="Store the chunk was retrieved from")


class ScoredChunkModel(ChunkModel):
    relevance_score: Optional[float] = Field(
        default=None,
        description="Cosine similarity to the query; null when re-ranking was skipped",
    )
    reranking_error: Optional[str] = None


class RerankRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Query the chunks are ranked against")
    chunks: List[ChunkModel] = Field(default_factory=list)
    top_k: Optional[int] = Field(default=None, ge=0, description="Override the number of chunks kept")
    min_relevance_score: Optional[float] = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Override the similarity threshold",
    )


class RerankResponse(BaseModel):
    chunks: List[ScoredChunkModel]
    degraded: bool = Field(default=False, description="True when chunks are returned unscored")


class RelevanceRequest(BaseModel):
    query: str = Field(..., min_length=1)
    document_text: str = Field(..., min_length=1)


class RelevanceResponse(BaseModel):
    score: float


class ChatTurnModel(BaseModel):
    role: Literal["user", "model"]
    text: str


class QueryRequest(BaseModel):
    question: str = Field(..., min_length=1, description="End-user question to answer")
    stores: List[NonEmptyName] = Field(..., min_length=1, description="File-search stores to ground the answer in")
    history: List[ChatTurnModel] = Field(default_factory=list)
    top_k: Optional[int] = Field(default=None, ge=0, description="Override the number of citations kept")
    min_relevance_score: Optional[float] = Field(default=None, ge=-1.0, le=1.0)


class QueryResponse(BaseModel):
    query_id: str
    answer: str
    citations: List[ScoredChunkModel]
    latency_ms: float
    generation_ms: Optional[float] = None
    rerank_ms: Optional[float] = None


class AnalysisRequest(BaseModel):
    store: str = Field(..., min_length=1, description="Store to analyse")
    use_cache: bool = Field(default=True, description="Serve a cached report when one is fresh")


class SynthesisRequest(BaseModel):
    stores: List[NonEmptyName] = Field(..., min_length=1)
    query: str = Field(..., min_length=1)


class SynthesisResponse(BaseModel):
    synthesis: str


class DashboardRequest(BaseModel):
    stores: List[NonEmptyName] = Field(..., min_length=1)


class TaskPlanRequest(BaseModel):
    store: str = Field(..., min_length=1)


class TaskPlanResponse(BaseModel):
    tasks: List[Dict[str, Any]]


class CacheInvalidationResponse(BaseModel):
    invalidated: str = Field(..., description="Cache key dropped, or '*' for every entry")


class NotesRequest(BaseModel):
    store: str = Field(..., min_length=1)
    documents: List[NonEmptyName] = Field(
        ..., min_length=1, description="Document names to take notes from"
    )


class NotesResponse(BaseModel):
    summary: str
    keyPoints: List[str]
    insights: List[str]
    actionItems: List[Dict[str, Any]]
    topics: List[Dict[str, Any]]
    synthesis: str
    failedSections: List[str]
    generatedAt: str
    documentCount: int
