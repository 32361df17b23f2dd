"""Service layer orchestrations for knowsynth."""

from .document_store import DocumentStore, EmptyDocumentStore, GeminiDocumentStore, list_all_documents
from .generation import (
    ChatTurn,
    GeminiGenerationBackend,
    GenerationBackend,
    GenerationConfig,
    TemplateGenerationBackend,
    build_generation_backend,
    grounding_chunks,
    response_text,
)
from .query import KnowledgeQueryService

__all__ = [
    "ChatTurn",
    "DocumentStore",
    "EmptyDocumentStore",
    "GeminiDocumentStore",
    "GeminiGenerationBackend",
    "GenerationBackend",
    "GenerationConfig",
    "KnowledgeQueryService",
    "TemplateGenerationBackend",
    "build_generation_backend",
    "grounding_chunks",
    "list_all_documents",
    "response_text",
]
