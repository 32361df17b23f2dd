"""Generation backends for knowsynth."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence, Union

from knowsynth.backend import GeminiRestClient
from knowsynth.config import Settings
from knowsynth.errors import BackendError
from knowsynth.models import ScoredChunk

LOGGER = logging.getLogger(__name__)

StoreNames = Union[str, Sequence[str]]
GenerationResponse = dict[str, Any]


@dataclass(frozen=True)
class ChatTurn:
    """One prior turn of conversation; ``role`` is ``user`` or ``model``."""

    role: str
    text: str


@dataclass(frozen=True)
class GenerationConfig:
    """Configuration for answer generation."""

    model: str = "gemini-2.5-flash"
    history_window: int = 10


class GenerationBackend(Protocol):
    """Protocol describing the collection-scoped generation call."""

    async def generate(
        self,
        store_names: StoreNames,
        prompt: str,
        history: Sequence[ChatTurn] = (),
        *,
        model: str | None = None,
    ) -> GenerationResponse:
        """Return the raw ``{candidates: [...]}`` response for ``prompt``."""


def as_store_list(store_names: StoreNames) -> list[str]:
    if isinstance(store_names, str):
        return [store_names]
    return list(store_names)


def _first_candidate(response: Mapping[str, Any]) -> Mapping[str, Any]:
    candidates = response.get("candidates") if isinstance(response, Mapping) else None
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], Mapping):
        return candidates[0]
    return {}


def response_text(response: Mapping[str, Any]) -> str:
    """Join the text parts of the first candidate with newlines."""

    content = _first_candidate(response).get("content")
    parts = content.get("parts") if isinstance(content, Mapping) else None
    if not isinstance(parts, list):
        return ""
    return "\n".join(str(part["text"]) for part in parts if isinstance(part, Mapping) and part.get("text"))


def grounding_chunks(response: Mapping[str, Any]) -> list[ScoredChunk]:
    """Map ``groundingMetadata.groundingChunks`` of the first candidate to chunks."""

    metadata = _first_candidate(response).get("groundingMetadata")
    raw_chunks = metadata.get("groundingChunks") if isinstance(metadata, Mapping) else None
    if not isinstance(raw_chunks, list):
        return []
    chunks: list[ScoredChunk] = []
    for raw in raw_chunks:
        context = raw.get("retrievedContext") if isinstance(raw, Mapping) else None
        if not isinstance(context, Mapping):
            context = {}
        chunks.append(
            ScoredChunk(
                title=str(context.get("title") or "Unknown"),
                text=str(context.get("text") or ""),
                source_collection=str(context.get("fileSearchStore") or ""),
            )
        )
    return chunks


class TemplateGenerationBackend:
    """Deterministic backend used for tests and offline environments."""

    async def generate(
        self,
        store_names: StoreNames,
        prompt: str,
        history: Sequence[ChatTurn] = (),
        *,
        model: str | None = None,
    ) -> GenerationResponse:
        stores = ", ".join(as_store_list(store_names)) or "no collection"
        text = (
            f"Summary: No generation backend is configured for {stores}.\n"
            f"Question: {prompt.strip().splitlines()[0] if prompt.strip() else ''}"
        )
        return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class GeminiGenerationBackend:
    """Generation through ``generateContent`` with a file-search tool over the store(s)."""

    def __init__(self, client: GeminiRestClient, config: GenerationConfig | None = None) -> None:
        self._client = client
        self._config = config or GenerationConfig()

    async def generate(
        self,
        store_names: StoreNames,
        prompt: str,
        history: Sequence[ChatTurn] = (),
        *,
        model: str | None = None,
    ) -> GenerationResponse:
        stores = as_store_list(store_names)
        if not stores:
            raise ValueError("At least one store name is required")
        window = list(history)[-self._config.history_window :] if self._config.history_window else []
        contents = [
            {"role": "model" if turn.role in ("model", "assistant") else "user", "parts": [{"text": turn.text}]}
            for turn in window
            if turn.text
        ]
        contents.append({"role": "user", "parts": [{"text": prompt}]})
        payload = {
            "contents": contents,
            "tools": [{"fileSearch": {"fileSearchStoreNames": stores}}],
        }
        model_name = model or self._config.model
        response = await self._client.post(
            f"models/{model_name}:generateContent",
            payload,
            error_message="Failed to generate content",
        )
        if not isinstance(response.get("candidates"), list):
            feedback = response.get("promptFeedback")
            raise BackendError(f"Failed to generate content: no candidates returned ({feedback or 'empty response'})")
        return response


def build_generation_backend(
    settings: Settings,
    *,
    rest_client: GeminiRestClient | None = None,
) -> GenerationBackend:
    if settings.generation_provider == "gemini":
        client = rest_client or GeminiRestClient(
            api_key=settings.google_api_key,
            base_url=settings.api_base_url,
            timeout=settings.request_timeout_seconds,
        )
        return GeminiGenerationBackend(
            client,
            GenerationConfig(model=settings.generation_model, history_window=settings.history_window),
        )
    LOGGER.info("Generation backend running in template-only mode.")
    return TemplateGenerationBackend()
