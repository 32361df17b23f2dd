"""Relevance re-ranking components."""

from .reranker import RerankConfig, Reranker

__all__ = ["RerankConfig", "Reranker"]
