"""Note generation over a selection of documents in one store."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Sequence

from knowsynth.analysis import prompts, schemas
from knowsynth.analysis.generative import GenerativeAnalyst
from knowsynth.analysis.orchestrator import AnalysisTask, fan_out, merge_outcomes
from knowsynth.metrics.observability import get_logger
from knowsynth.models import AnalysisReport

LOGGER = get_logger("analysis.notes")

NOTE_SECTIONS = {
    "summary": "summary",
    "key_points": "key points",
    "action_items": "action items",
    "topics": "main topics and themes",
}

NO_NOTES_TEXT = "No notes generated."
NO_SUMMARY_TEXT = "No summary generated."
NO_SYNTHESIS_TEXT = "No synthesis generated."


def document_listing(document_names: Sequence[str]) -> str:
    return "\n".join(f"{index}. {name}" for index, name in enumerate(document_names, start=1))


def notes_prompt(document_names: Sequence[str], sections: Sequence[str]) -> str:
    labels = [NOTE_SECTIONS[section] for section in sections]
    if not labels:
        head = prompts.NOTES_OPEN_PROMPT
    elif len(labels) == 1:
        head = prompts.NOTES_SINGLE_SECTION_PROMPT.format(section=labels[0])
    else:
        head = prompts.NOTES_SECTIONS_PROMPT.format(sections=", ".join(labels))
    return head + prompts.NOTES_BODY_PROMPT.format(documents=document_listing(document_names))


class NoteService:
    """Notes, insights, action items, topic clusters and a synthesis for chosen documents.

    The single-purpose methods make one generation call each and let backend
    errors propagate. ``generate_comprehensive_notes`` runs all of them at once;
    a failed section is replaced by its default and named in ``failedSections``.
    """

    def __init__(self, analyst: GenerativeAnalyst) -> None:
        self._analyst = analyst

    async def generate_notes(
        self,
        store_name: str,
        document_names: Sequence[str],
        *,
        include_summary: bool = True,
        include_key_points: bool = True,
        include_action_items: bool = True,
        include_topics: bool = True,
    ) -> str:
        flags = {
            "summary": include_summary,
            "key_points": include_key_points,
            "action_items": include_action_items,
            "topics": include_topics,
        }
        prompt = notes_prompt(document_names, [section for section, wanted in flags.items() if wanted])
        text = await self._analyst.ask_text(store_name, prompt)
        return text.strip() or NO_NOTES_TEXT

    async def summarize_documents(self, store_name: str, document_names: Sequence[str]) -> str:
        text = await self._analyst.ask_text(store_name, notes_prompt(document_names, ["summary"]))
        return text.strip() or NO_SUMMARY_TEXT

    async def extract_key_points(self, store_name: str, document_names: Sequence[str]) -> list[str]:
        result, _ = await self._analyst.ask_structured(
            store_name, notes_prompt(document_names, ["key_points"]), schemas.KEY_POINTS_SCHEMA, purpose="key_points"
        )
        return result.values["keyPoints"]

    async def extract_key_insights(self, store_name: str, document_names: Sequence[str]) -> list[str]:
        prompt = prompts.KEY_INSIGHTS_PROMPT.format(documents=document_listing(document_names))
        result, _ = await self._analyst.ask_structured(
            store_name, prompt, schemas.KEY_INSIGHTS_SCHEMA, purpose="key_insights"
        )
        return result.values["insights"]

    async def generate_action_items(self, store_name: str, document_names: Sequence[str]) -> list[dict[str, Any]]:
        prompt = prompts.NOTES_ACTION_ITEMS_PROMPT.format(documents=document_listing(document_names))
        result, _ = await self._analyst.ask_structured(
            store_name, prompt, schemas.ACTION_ITEMS_SCHEMA, purpose="note_action_items"
        )
        return result.values["actionItems"]

    async def cluster_topics(self, store_name: str, document_names: Sequence[str]) -> list[dict[str, Any]]:
        prompt = prompts.TOPIC_CLUSTERS_PROMPT.format(documents=document_listing(document_names))
        result, _ = await self._analyst.ask_structured(
            store_name, prompt, schemas.TOPIC_CLUSTERS_SCHEMA, purpose="topic_clusters"
        )
        return result.values["clusters"]

    async def synthesize_documents(self, store_name: str, document_names: Sequence[str]) -> str:
        prompt = prompts.DOCUMENT_SYNTHESIS_PROMPT.format(documents=document_listing(document_names))
        text = await self._analyst.ask_text(store_name, prompt)
        return text.strip() or NO_SYNTHESIS_TEXT

    async def generate_comprehensive_notes(
        self, store_name: str, document_names: Sequence[str], *, now: datetime | None = None
    ) -> AnalysisReport:
        names = list(document_names)
        if not names:
            raise ValueError("At least one document must be selected")
        start = time.perf_counter()
        outcomes = await fan_out(
            [
                AnalysisTask("summary", lambda: self.summarize_documents(store_name, names), fallback=NO_SUMMARY_TEXT),
                AnalysisTask("keyPoints", lambda: self.extract_key_points(store_name, names), fallback=[]),
                AnalysisTask("insights", lambda: self.extract_key_insights(store_name, names), fallback=[]),
                AnalysisTask("actionItems", lambda: self.generate_action_items(store_name, names), fallback=[]),
                AnalysisTask("topics", lambda: self.cluster_topics(store_name, names), fallback=[]),
                AnalysisTask(
                    "synthesis", lambda: self.synthesize_documents(store_name, names), fallback=NO_SYNTHESIS_TEXT
                ),
            ]
        )
        notes = merge_outcomes(outcomes)
        notes["failedSections"] = [outcome.name for outcome in outcomes if not outcome.succeeded]
        notes["generatedAt"] = (now or datetime.now(timezone.utc)).isoformat()
        notes["documentCount"] = len(names)
        LOGGER.info(
            "notes.generated",
            store=store_name,
            documents=len(names),
            failed=notes["failedSections"],
            duration_seconds=time.perf_counter() - start,
        )
        return notes


__all__ = ["NoteService", "document_listing", "notes_prompt"]
