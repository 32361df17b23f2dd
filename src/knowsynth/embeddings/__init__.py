"""Embedding gateways and vector scoring."""

from .scoring import cosine_similarity
from .service import (
    EmbeddingConfig,
    EmbeddingGateway,
    GeminiEmbeddingGateway,
    HashEmbeddingGateway,
    LangChainEmbeddingGateway,
    build_embedding_gateway,
)

__all__ = [
    "EmbeddingConfig",
    "EmbeddingGateway",
    "GeminiEmbeddingGateway",
    "HashEmbeddingGateway",
    "LangChainEmbeddingGateway",
    "build_embedding_gateway",
    "cosine_similarity",
]
