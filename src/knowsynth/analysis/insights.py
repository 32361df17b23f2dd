"""Proactive insights, recommendations and pattern detection over stored knowledge."""

from __future__ import annotations

from typing import Any

from knowsynth.analysis import prompts, schemas
from knowsynth.analysis.generative import GenerativeAnalyst
from knowsynth.extraction import NOT_JSON, parse_json_literal
from knowsynth.services.generation import StoreNames


class InsightService:
    """Cross-document insight calls.

    Every method makes a single generation call and returns a record of fixed
    shape; backend failures propagate as ``BackendError`` so a caller fanning
    these out can substitute its own fallback.
    """

    def __init__(self, analyst: GenerativeAnalyst) -> None:
        self._analyst = analyst

    async def generate_insights(self, store_names: StoreNames) -> dict[str, Any]:
        result, _ = await self._analyst.ask_structured(
            store_names, prompts.INSIGHTS_PROMPT, schemas.INSIGHTS_SCHEMA, purpose="insights"
        )
        return result.values

    async def generate_recommendations(self, store_names: StoreNames, context: str | None = None) -> list[dict[str, Any]]:
        prompt = prompts.RECOMMENDATIONS_PROMPT.format(context=f"\nCurrent context: {context}\n" if context else "")
        result, _ = await self._analyst.ask_structured(
            store_names, prompt, schemas.RECOMMENDATIONS_SCHEMA, purpose="recommendations"
        )
        return result.values["recommendations"]

    async def analyze_writing_style(self, store_names: StoreNames, current_text: str) -> dict[str, Any]:
        prompt = prompts.WRITING_STYLE_PROMPT.format(current_text=current_text)
        result, text = await self._analyst.ask_structured(
            store_names, prompt, schemas.WRITING_STYLE_SCHEMA, purpose="writing_style"
        )
        return {"consistent": _is_consistent(text), **result.values}

    async def detect_patterns(self, store_names: StoreNames) -> dict[str, Any]:
        result, _ = await self._analyst.ask_structured(
            store_names, prompts.PATTERNS_PROMPT, schemas.PATTERNS_SCHEMA, purpose="patterns"
        )
        return result.values

    async def get_context_aware_suggestions(self, store_names: StoreNames, current_context: str) -> list[dict[str, Any]]:
        prompt = prompts.SUGGESTIONS_PROMPT.format(context=current_context)
        result, _ = await self._analyst.ask_structured(
            store_names, prompt, schemas.SUGGESTIONS_SCHEMA, purpose="suggestions"
        )
        return result.values["suggestions"]


def _is_consistent(text: str) -> bool:
    parsed = parse_json_literal(text)
    if parsed is not NOT_JSON and isinstance(parsed, dict) and "consistent" in parsed:
        value = parsed["consistent"]
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "consistent")
        return bool(value)
    lowered = text.lower()
    return "consistent" in lowered or "matches" in lowered
