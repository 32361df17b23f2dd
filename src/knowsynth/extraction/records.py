"""Line-oriented fallbacks that turn prose responses into record lists."""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

_ITEM_PREFIX = re.compile(r"^\s*(?:\d+\.|[-*•])\s*")
_TOPIC_LINE = re.compile(r"^\s*(?:\d+\.|[-*•]|[A-Z])")
_ACTION_LINE = re.compile(r"^\s*(?:\d+\.|[-*•]|(?:TODO|ACTION|TASK))", re.IGNORECASE)
_ACTION_PREFIX = re.compile(r"^\s*(?:\d+\.|[-*•]|(?:TODO|ACTION|TASK):?)\s*", re.IGNORECASE)
_LIST_LINE = re.compile(r"^\s*(?:\d+\.|[-*•])")


def _lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip()]


def topic_record(name: str, *, description: str | None = None) -> dict[str, Any]:
    return {
        "name": name,
        "frequency": "medium",
        "importance": "medium",
        "description": description if description is not None else name,
        "relatedDocuments": [],
    }


def parse_topics_from_text(text: str) -> list[dict[str, Any]]:
    if not text.strip():
        return []
    topics: list[dict[str, Any]] = []
    for line in _lines(text):
        if not _TOPIC_LINE.match(line):
            continue
        name = re.split(r"[:\-]", _ITEM_PREFIX.sub("", line), maxsplit=1)[0].strip().strip("*_ ")
        if name:
            topics.append(topic_record(name, description=line.strip()))
    if topics:
        return topics
    return [
        {
            "name": "General",
            "frequency": "low",
            "importance": "low",
            "description": text.strip(),
            "relatedDocuments": [],
        }
    ]


def action_item_record(description: str, *, priority_hint: str | None = None) -> dict[str, Any]:
    lowered = (priority_hint if priority_hint is not None else description).lower()
    if "high" in lowered:
        priority = "high"
    elif "low" in lowered:
        priority = "low"
    else:
        priority = "medium"
    return {
        "description": description,
        "priority": priority,
        "dueDate": None,
        "assignee": None,
        "document": None,
        "status": "pending",
    }


def parse_action_items_from_text(text: str) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = []
    for line in _lines(text):
        if not _ACTION_LINE.match(line):
            continue
        description = _ACTION_PREFIX.sub("", line).strip()
        if description:
            items.append(action_item_record(description, priority_hint=line))
    return items


def recommendation_record(title: str) -> dict[str, Any]:
    return {"type": "general", "title": title, "description": "", "priority": "medium", "actionItems": []}


def parse_recommendations_from_text(text: str) -> list[dict[str, Any]]:
    recommendations: list[dict[str, Any]] = []
    current: dict[str, Any] | None = None
    for line in _lines(text):
        if _LIST_LINE.match(line):
            if current is not None:
                recommendations.append(current)
            current = recommendation_record(_ITEM_PREFIX.sub("", line).strip())
        elif current is not None:
            joiner = " " if current["description"] else ""
            current["description"] += joiner + line.strip()
    if current is not None:
        recommendations.append(current)
    if recommendations:
        return recommendations
    return [{"type": "general", "title": "No recommendations", "description": text.strip()}]


def suggestion_record(title: str) -> dict[str, Any]:
    return {"type": "general", "title": title, "description": "", "relevance": "medium", "source": "knowledge base"}


def parse_suggestions_from_text(text: str) -> list[dict[str, Any]]:
    suggestions = [
        suggestion_record(_ITEM_PREFIX.sub("", line).strip()) for line in _lines(text) if _LIST_LINE.match(line)
    ]
    if suggestions:
        return suggestions
    return [{"type": "general", "title": "No suggestions", "description": text.strip()}]


def parse_list_items_from_text(text: str) -> list[str]:
    items = [_ITEM_PREFIX.sub("", line).strip().strip("*_ ") for line in _lines(text) if _LIST_LINE.match(line)]
    items = [item for item in items if item]
    if items or not text.strip():
        return items
    return [text.strip()]


def cluster_record(name: str, *, description: str = "") -> dict[str, Any]:
    return {"name": name, "description": description, "topics": [], "documents": []}


def parse_clusters_from_text(text: str) -> list[dict[str, Any]]:
    clusters: list[dict[str, Any]] = []
    for item in parse_list_items_from_text(text):
        name, _, description = item.partition(":")
        clusters.append(cluster_record(name.strip().strip("*_ "), description=description.strip()))
    return clusters


def create_basic_relationships(documents: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Pair documents whose display names share a five-character prefix."""

    relationships: list[dict[str, Any]] = []
    for i, first in enumerate(documents):
        for second in documents[i + 1 :]:
            name1 = str(first.get("displayName") or first.get("name") or "").lower()
            name2 = str(second.get("displayName") or second.get("name") or "").lower()
            if not name1 or not name2:
                continue
            if name2[:5] in name1 or name1[:5] in name2:
                relationships.append(
                    {
                        "document1": first.get("name"),
                        "document2": second.get("name"),
                        "relationshipType": "similar",
                        "strength": "medium",
                        "description": "Documents with similar names",
                    }
                )
    return relationships


__all__ = [
    "action_item_record",
    "cluster_record",
    "create_basic_relationships",
    "parse_action_items_from_text",
    "parse_clusters_from_text",
    "parse_list_items_from_text",
    "parse_recommendations_from_text",
    "parse_suggestions_from_text",
    "parse_topics_from_text",
    "recommendation_record",
    "suggestion_record",
    "topic_record",
]
