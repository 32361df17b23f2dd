"""Task extraction, prioritisation and workflow planning from stored documents."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from knowsynth.analysis import prompts, schemas
from knowsynth.analysis.documents import DocumentAnalysisService
from knowsynth.analysis.generative import GenerativeAnalyst
from knowsynth.analysis.orchestrator import AnalysisTask, fan_out, merge_outcomes
from knowsynth.extraction import NOT_JSON, JsonLiteralStrategy, parse_json_literal
from knowsynth.metrics.observability import get_logger
from knowsynth.services.generation import StoreNames

LOGGER = get_logger("analysis.tasks")

# Leading characters of a description used to match model output back to tasks.
MATCH_PREFIX_LENGTH = 20


def _json_records(text: str) -> list[dict[str, Any]] | None:
    parsed = parse_json_literal(text)
    if parsed is NOT_JSON:
        return None
    if isinstance(parsed, dict):
        parsed = [parsed]
    if not isinstance(parsed, list):
        return None
    return [item for item in parsed if isinstance(item, dict)]


def _match(task: Mapping[str, Any], records: Sequence[Mapping[str, Any]]) -> Mapping[str, Any] | None:
    description = str(task.get("description") or "")
    for record in records:
        candidate = record.get("description")
        if candidate and str(candidate)[:MATCH_PREFIX_LENGTH] in description:
            return record
    return None


def task_from_action_item(item: Any, index: int, *, now: datetime | None = None) -> dict[str, Any]:
    created = now or datetime.now(timezone.utc)
    stamp = int(created.timestamp() * 1000)
    if not isinstance(item, Mapping):
        item = {"description": str(item)}
    return {
        "id": f"task_{stamp}_{index}",
        "description": item.get("description") or "",
        "priority": item.get("priority") or "medium",
        "dueDate": item.get("dueDate") or None,
        "assignee": item.get("assignee") or None,
        "source": item.get("document") or None,
        "status": item.get("status") or "pending",
        "createdAt": created.isoformat(),
    }


class TaskService:
    def __init__(self, analyst: GenerativeAnalyst, documents: DocumentAnalysisService) -> None:
        self._analyst = analyst
        self._documents = documents

    async def extract_tasks(self, store_name: str) -> list[dict[str, Any]]:
        items = await self._documents.extract_action_items(store_name)
        now = datetime.now(timezone.utc)
        return [task_from_action_item(item, index, now=now) for index, item in enumerate(items)]

    async def calculate_task_priorities(
        self, store_names: StoreNames, tasks: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Re-rank task priorities; any failure leaves ``tasks`` as they were."""

        return await self._annotate(
            store_names,
            tasks,
            prompts.PRIORITIES_PROMPT,
            purpose="priorities",
            apply=lambda task, record: {
                **task,
                "priority": record.get("priority") or task.get("priority"),
                "priorityReasoning": record.get("reasoning"),
            },
        )

    async def estimate_task_time(
        self, store_names: StoreNames, tasks: Sequence[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        return await self._annotate(
            store_names,
            tasks,
            prompts.ESTIMATES_PROMPT,
            purpose="estimates",
            apply=lambda task, record: {
                **task,
                "estimatedHours": record.get("estimatedHours"),
                "complexity": record.get("complexity"),
                "timeFactors": record.get("factors"),
            },
        )

    async def _annotate(self, store_names, tasks, template, *, purpose, apply) -> list[dict[str, Any]]:
        original = [dict(task) for task in tasks]
        if not original:
            return original
        prompt = template.format(tasks="\n".join(str(task.get("description") or "") for task in original))
        try:
            text = await self._analyst.ask_text(store_names, prompt)
        except Exception as exc:
            LOGGER.warning("tasks.annotation_failed", purpose=purpose, error=str(exc))
            return original
        records = _json_records(text)
        if records is None:
            LOGGER.warning("tasks.annotation_unparsed", purpose=purpose, text_length=len(text))
            return original
        annotated = []
        for task in original:
            record = _match(task, records)
            annotated.append(apply(task, record) if record is not None else task)
        return annotated

    async def generate_workflow_template(self, store_names: StoreNames, workflow_type: str = "general") -> dict[str, Any]:
        prompt = prompts.WORKFLOW_TEMPLATE_PROMPT.format(workflow_type=workflow_type)
        result, text = await self._analyst.ask_structured(
            store_names, prompt, schemas.WORKFLOW_TEMPLATE_SCHEMA, purpose="workflow_template"
        )
        if JsonLiteralStrategy.name not in result.strategies.values():
            return {
                "name": f"{workflow_type} Workflow",
                "description": text,
                "steps": [],
                "resources": [],
                "timeline": "Variable",
                "milestones": [],
                "tips": [],
            }
        template = dict(result.values)
        template["name"] = template["name"] or f"{workflow_type} Workflow"
        template["timeline"] = template["timeline"] or "Variable"
        return template

    async def recommend_documents_for_task(self, store_names: StoreNames, task_description: str) -> list[dict[str, Any]]:
        prompt = prompts.TASK_DOCUMENTS_PROMPT.format(task=task_description)
        text = await self._analyst.ask_text(store_names, prompt)
        return _json_records(text) or []

    async def plan_workflow(self, store_name: str) -> dict[str, Any]:
        """Extract tasks, then prioritise and estimate them concurrently.

        Both annotations are merged onto each task; an annotation that fails
        leaves its fields off rather than failing the plan.
        """

        start = time.perf_counter()
        tasks = await self.extract_tasks(store_name)
        outcomes = await fan_out(
            [
                AnalysisTask("priorities", lambda: self.calculate_task_priorities(store_name, tasks), fallback=tasks),
                AnalysisTask("estimates", lambda: self.estimate_task_time(store_name, tasks), fallback=tasks),
            ]
        )
        merged = merge_outcomes(outcomes)
        planned = [
            {**task, **estimated, **prioritised}
            for task, prioritised, estimated in zip(tasks, merged["priorities"], merged["estimates"])
        ]
        LOGGER.info(
            "tasks.planned",
            store=store_name,
            tasks=len(planned),
            duration_seconds=time.perf_counter() - start,
        )
        return {"tasks": planned}
