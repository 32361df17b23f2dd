"""Cached, fan-out analysis services over knowledge stores."""

from .cache import AnalysisCache, CacheEntry, ReportCache, make_cache_key
from .dashboard import DashboardService
from .documents import DocumentAnalysisService
from .generative import GenerativeAnalyst
from .insights import InsightService
from .notes import NoteService
from .orchestrator import AnalysisTask, FanOutOrchestrator, TaskOutcome, error_marker, fan_out, merge_outcomes
from .tasks import TaskService

__all__ = [
    "AnalysisCache",
    "AnalysisTask",
    "CacheEntry",
    "DashboardService",
    "DocumentAnalysisService",
    "FanOutOrchestrator",
    "GenerativeAnalyst",
    "InsightService",
    "NoteService",
    "ReportCache",
    "TaskOutcome",
    "TaskService",
    "error_marker",
    "fan_out",
    "make_cache_key",
    "merge_outcomes",
]
