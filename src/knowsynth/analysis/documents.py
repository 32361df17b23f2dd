"""Store-wide document analysis: topics, summaries, relationships, trends and synthesis."""

from __future__ import annotations

from typing import Any, Sequence

from knowsynth.analysis import prompts, schemas
from knowsynth.analysis.cache import make_cache_key
from knowsynth.analysis.generative import GenerativeAnalyst
from knowsynth.analysis.insights import InsightService
from knowsynth.analysis.orchestrator import AnalysisTask, FanOutOrchestrator, error_marker
from knowsynth.extraction import JsonLiteralStrategy
from knowsynth.extraction.records import create_basic_relationships
from knowsynth.metrics.observability import get_logger
from knowsynth.models import AnalysisReport
from knowsynth.services.document_store import DocumentStore, list_all_documents
from knowsynth.services.generation import StoreNames, as_store_list

LOGGER = get_logger("analysis.documents")

# Section name -> fallback payload used when that analysis fails or the store is empty.
REPORT_SECTIONS: dict[str, Any] = {
    "summaries": [],
    "topics": [],
    "relationships": [],
    "actionItems": [],
    "trends": schemas.TRENDS_SCHEMA.zero_record(),
    "insights": {},
    "patterns": None,
}


class DocumentAnalysisService:
    """Comprehensive, cached analysis of the documents in one store."""

    def __init__(
        self,
        analyst: GenerativeAnalyst,
        document_store: DocumentStore,
        orchestrator: FanOutOrchestrator,
        insights: InsightService | None = None,
        *,
        summary_max_documents: int = 20,
        page_size: int = 20,
    ) -> None:
        self._analyst = analyst
        self._documents = document_store
        self._orchestrator = orchestrator
        self._insights = insights or InsightService(analyst)
        self._summary_max_documents = summary_max_documents
        self._page_size = page_size

    async def analyze_store(self, store_name: str, *, use_cache: bool = True) -> AnalysisReport:
        """Return the full report for ``store_name``.

        A cached report is returned without listing documents. Listing failures
        propagate, since no analysis can be attempted without them. An empty
        store yields the zero-shaped report, which is not cached.
        """

        key = make_cache_key(store_name)
        if use_cache:
            cached = self._orchestrator.lookup(key)
            if cached is not None:
                return cached
        documents = await list_all_documents(self._documents, store_name, page_size=self._page_size)
        if not documents:
            LOGGER.info("analysis.empty_store", store=store_name)
            return self.empty_report()
        return await self._orchestrator.run(key, self.analysis_tasks(store_name, documents), use_cache=False)

    def analysis_tasks(self, store_name: str, documents: Sequence[dict[str, Any]]) -> list[AnalysisTask]:
        return [
            AnalysisTask("summaries", lambda: self.generate_document_summaries(store_name, documents), fallback=[]),
            AnalysisTask("topics", lambda: self.extract_topics(store_name), fallback=[]),
            AnalysisTask("relationships", lambda: self.map_document_relationships(store_name, documents), fallback=[]),
            AnalysisTask("actionItems", lambda: self.extract_action_items(store_name), fallback=[]),
            AnalysisTask("trends", lambda: self.detect_trends(store_name), fallback=REPORT_SECTIONS["trends"]),
            AnalysisTask("insights", lambda: self._insights.generate_insights(store_name), on_error=error_marker),
            AnalysisTask("patterns", lambda: self._insights.detect_patterns(store_name), fallback=None),
        ]

    @staticmethod
    def empty_report() -> AnalysisReport:
        return {
            name: (dict(value) if isinstance(value, dict) else list(value) if isinstance(value, list) else value)
            for name, value in REPORT_SECTIONS.items()
        }

    async def extract_topics(self, store_names: StoreNames) -> list[dict[str, Any]]:
        result, _ = await self._analyst.ask_structured(
            store_names, prompts.TOPICS_PROMPT, schemas.TOPICS_SCHEMA, purpose="topics"
        )
        return result.values["topics"]

    async def extract_action_items(self, store_names: StoreNames) -> list[dict[str, Any]]:
        result, _ = await self._analyst.ask_structured(
            store_names, prompts.ACTION_ITEMS_PROMPT, schemas.ACTION_ITEMS_SCHEMA, purpose="action_items"
        )
        return result.values["actionItems"]

    async def generate_document_summaries(
        self,
        store_name: str,
        documents: Sequence[dict[str, Any]],
        max_documents: int | None = None,
    ) -> list[dict[str, Any]]:
        limit = self._summary_max_documents if max_documents is None else max_documents
        batch = list(documents)[:limit]
        result, text = await self._analyst.ask_structured(
            store_name, prompts.SUMMARIES_PROMPT, schemas.SUMMARIES_SCHEMA, purpose="summaries"
        )
        if result.strategy_for("summaries") == JsonLiteralStrategy.name:
            return result.values["summaries"]
        return [
            {
                "documentName": document.get("name"),
                "title": document.get("displayName") or f"Document {index + 1}",
                "mainPoints": [],
                "purpose": "Document in knowledge base",
                "takeaways": text,
            }
            for index, document in enumerate(batch)
        ]

    async def map_document_relationships(
        self,
        store_name: str,
        documents: Sequence[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        result, _ = await self._analyst.ask_structured(
            store_name, prompts.RELATIONSHIPS_PROMPT, schemas.RELATIONSHIPS_SCHEMA, purpose="relationships"
        )
        if result.strategy_for("relationships") == JsonLiteralStrategy.name:
            return result.values["relationships"]
        return create_basic_relationships(documents)

    async def detect_trends(self, store_names: StoreNames) -> dict[str, Any]:
        result, _ = await self._analyst.ask_structured(
            store_names, prompts.TRENDS_PROMPT, schemas.TRENDS_SCHEMA, purpose="trends"
        )
        return result.values

    async def synthesize_knowledge(self, store_names: StoreNames, query: str) -> str:
        prompt = prompts.SYNTHESIS_PROMPT.format(query=query)
        return await self._analyst.ask_text(as_store_list(store_names), prompt)

    def clear_cache(self, store_name: str | None = None) -> None:
        self._orchestrator.invalidate(make_cache_key(store_name) if store_name else None)
