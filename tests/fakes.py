"""In-memory stand-ins for the generation, embedding and document backends."""

from __future__ import annotations

import asyncio
import math
import re
from typing import Any, Sequence

from knowsynth.errors import BackendError
from knowsynth.models import EmbeddingVector, TaskType


def text_response(text: str, chunks: Sequence[dict[str, Any]] = ()) -> dict[str, Any]:
    candidate: dict[str, Any] = {"content": {"role": "model", "parts": [{"text": text}]}}
    if chunks:
        candidate["groundingMetadata"] = {"groundingChunks": [{"retrievedContext": chunk} for chunk in chunks]}
    return {"candidates": [candidate]}


class ScriptedGenerator:
    """Answer prompts by the first registered marker they contain.

    A registered value that is an exception instance is raised instead.
    """

    def __init__(self, script: dict[str, Any] | None = None, default: Any = "") -> None:
        self.script = dict(script or {})
        self.default = default
        self.calls: list[tuple[list[str], str]] = []

    async def generate(self, store_names, prompt, history=(), *, model=None) -> dict[str, Any]:
        stores = [store_names] if isinstance(store_names, str) else list(store_names)
        self.calls.append((stores, prompt))
        await asyncio.sleep(0)
        reply = self.default
        for marker, value in self.script.items():
            if marker in prompt:
                reply = value
                break
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, dict):
            return reply
        return text_response(reply)

    def prompts_containing(self, marker: str) -> list[str]:
        return [prompt for _, prompt in self.calls if marker in prompt]


class BagOfWordsGateway:
    """Embed texts as word counts over a fixed vocabulary."""

    def __init__(self, vocabulary: Sequence[str]) -> None:
        self.vocabulary = list(vocabulary)
        self.calls: list[tuple[str, Any]] = []

    def _vector(self, text: str, task_type: TaskType) -> EmbeddingVector:
        words = re.findall(r"[a-z]+", text.lower())
        return EmbeddingVector(values=tuple(float(words.count(term)) for term in self.vocabulary), task_type=task_type)

    async def embed(self, text: str, task_type: TaskType = TaskType.QUERY) -> EmbeddingVector:
        self.calls.append(("embed", text))
        return self._vector(text, task_type)

    async def embed_batch(self, texts: Sequence[str], task_type: TaskType = TaskType.DOCUMENT) -> list[EmbeddingVector]:
        self.calls.append(("embed_batch", list(texts)))
        return [self._vector(text, task_type) for text in texts]


class MismatchedGateway(BagOfWordsGateway):
    """Query vectors carry one more dimension than document vectors."""

    def _vector(self, text: str, task_type: TaskType) -> EmbeddingVector:
        vector = super()._vector(text, task_type)
        if task_type is TaskType.QUERY:
            return EmbeddingVector(values=vector.values + (1.0,), task_type=task_type)
        return vector


class FailingGateway:
    def __init__(self, message: str = "quota exceeded") -> None:
        self.message = message
        self.calls = 0

    async def embed(self, text, task_type=TaskType.QUERY):
        self.calls += 1
        raise BackendError(self.message, status_code=429)

    async def embed_batch(self, texts, task_type=TaskType.DOCUMENT):
        self.calls += 1
        return [EmbeddingVector(values=(1.0,), task_type=task_type) for _ in texts]


class StaticDocumentStore:
    """Serve a fixed document list, ``page_size`` documents per page."""

    def __init__(self, documents: Sequence[dict[str, Any]] = (), error: Exception | None = None) -> None:
        self.documents = list(documents)
        self.error = error
        self.calls: list[tuple[str, int, str | None]] = []

    async def list_documents(self, store_name: str, page_size: int = 20, page_token: str | None = None) -> dict[str, Any]:
        self.calls.append((store_name, page_size, page_token))
        if self.error is not None:
            raise self.error
        offset = int(page_token or 0)
        page: dict[str, Any] = {"documents": self.documents[offset : offset + page_size]}
        if offset + page_size < len(self.documents):
            page["nextPageToken"] = str(offset + page_size)
        return page


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def norm(values: Sequence[float]) -> float:
    return math.sqrt(sum(value * value for value in values))
