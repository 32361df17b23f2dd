"""Knowledge dashboard assembled from independent insight calls."""

from __future__ import annotations

from typing import Sequence

from knowsynth.analysis.documents import DocumentAnalysisService
from knowsynth.analysis.insights import InsightService
from knowsynth.analysis.orchestrator import AnalysisTask, error_marker, fan_out, merge_outcomes
from knowsynth.metrics.observability import get_logger
from knowsynth.models import AnalysisReport

LOGGER = get_logger("analysis.dashboard")


class DashboardService:
    """Fan out every dashboard panel at once; a failed panel falls back alone.

    Store-scoped panels (topics, action items, full analysis) use the first
    selected store; the others see every selected store.
    """

    def __init__(self, insights: InsightService, documents: DocumentAnalysisService) -> None:
        self._insights = insights
        self._documents = documents

    async def build(self, store_names: Sequence[str]) -> AnalysisReport:
        stores = [name for name in store_names if name]
        if not stores:
            raise ValueError("At least one store must be selected")
        primary = stores[0]
        outcomes = await fan_out(
            [
                AnalysisTask("insights", lambda: self._insights.generate_insights(stores), on_error=error_marker),
                AnalysisTask("recommendations", lambda: self._insights.generate_recommendations(stores), fallback=[]),
                AnalysisTask("topics", lambda: self._documents.extract_topics(primary), fallback=[]),
                AnalysisTask("actionItems", lambda: self._documents.extract_action_items(primary), fallback=[]),
                AnalysisTask("patterns", lambda: self._insights.detect_patterns(stores), fallback=None),
                AnalysisTask("analysis", lambda: self._documents.analyze_store(primary), fallback=None),
            ]
        )
        LOGGER.info(
            "dashboard.built",
            stores=stores,
            degraded=[outcome.name for outcome in outcomes if not outcome.succeeded],
        )
        return merge_outcomes(outcomes)
