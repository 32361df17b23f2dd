"""Extraction schemas for each analysis response."""

from __future__ import annotations

from knowsynth.extraction.records import (
    action_item_record,
    cluster_record,
    parse_action_items_from_text,
    parse_clusters_from_text,
    parse_list_items_from_text,
    parse_recommendations_from_text,
    parse_suggestions_from_text,
    parse_topics_from_text,
    recommendation_record,
    suggestion_record,
    topic_record,
)
from knowsynth.extraction.schema import ExtractionSchema, Section, SectionKind

TEXT = SectionKind.TEXT
LIST = SectionKind.LIST
RECORDS = SectionKind.RECORDS

TOPICS_SCHEMA = ExtractionSchema.of(
    Section(
        "topics",
        RECORDS,
        aliases=("key topics", "themes"),
        record_factory=topic_record,
        text_parser=parse_topics_from_text,
    ),
)

ACTION_ITEMS_SCHEMA = ExtractionSchema.of(
    Section(
        "actionItems",
        RECORDS,
        aliases=("tasks", "to-dos"),
        record_factory=action_item_record,
        text_parser=parse_action_items_from_text,
    ),
)

SUMMARIES_SCHEMA = ExtractionSchema.of(Section("summaries", RECORDS, record_key="title"))

RELATIONSHIPS_SCHEMA = ExtractionSchema.of(Section("relationships", RECORDS, record_key="description"))

TRENDS_SCHEMA = ExtractionSchema.of(
    Section("increasingTopics", LIST, aliases=("increasing",)),
    Section("decreasingTopics", LIST, aliases=("decreasing",)),
    Section("emergingTopics", LIST, aliases=("emerging", "new topics")),
    Section("decliningTopics", LIST, aliases=("declining",)),
    Section("evolution", TEXT, aliases=("content evolution",), keep_full_text=True),
)

INSIGHTS_SCHEMA = ExtractionSchema.of(
    Section("topics", LIST, aliases=("key topics & themes", "key topics", "themes")),
    Section("relationships", TEXT, aliases=("document relationships",)),
    Section("knowledgeGaps", TEXT, aliases=("gaps",)),
    Section("trends", TEXT, aliases=("trends & patterns",)),
    Section("actionItems", LIST, aliases=("tasks",)),
    Section("importantInfo", TEXT, aliases=("important information",), keep_full_text=True),
)

PATTERNS_SCHEMA = ExtractionSchema.of(
    Section("contentPatterns", LIST, aliases=("content",)),
    Section("writingPatterns", LIST, aliases=("writing",)),
    Section("temporalPatterns", LIST, aliases=("temporal",)),
    Section("relationshipPatterns", LIST, aliases=("relationship",)),
    Section("usagePatterns", LIST, aliases=("usage",)),
)

RECOMMENDATIONS_SCHEMA = ExtractionSchema.of(
    Section(
        "recommendations",
        RECORDS,
        record_factory=recommendation_record,
        text_parser=parse_recommendations_from_text,
    ),
)

WRITING_STYLE_SCHEMA = ExtractionSchema.of(
    Section("suggestions", LIST, aliases=("improvements",)),
    Section("tone", TEXT, aliases=("tone analysis",)),
    Section("formatting", TEXT, aliases=("formatting suggestions",)),
)

SUGGESTIONS_SCHEMA = ExtractionSchema.of(
    Section(
        "suggestions",
        RECORDS,
        record_factory=suggestion_record,
        text_parser=parse_suggestions_from_text,
    ),
)

PRIORITIES_SCHEMA = ExtractionSchema.of(Section("priorities", RECORDS, record_key="description"))

ESTIMATES_SCHEMA = ExtractionSchema.of(Section("estimates", RECORDS, record_key="description"))

WORKFLOW_TEMPLATE_SCHEMA = ExtractionSchema.of(
    Section("name", TEXT),
    Section("description", TEXT, keep_full_text=True),
    Section("steps", RECORDS, aliases=("phases",)),
    Section("resources", LIST),
    Section("timeline", TEXT),
    Section("milestones", LIST),
    Section("tips", LIST, aliases=("pitfalls",)),
)

TASK_DOCUMENTS_SCHEMA = ExtractionSchema.of(Section("documents", RECORDS, record_key="documentName"))

KEY_POINTS_SCHEMA = ExtractionSchema.of(
    Section("keyPoints", LIST, aliases=("key points", "main points"), text_parser=parse_list_items_from_text),
)

KEY_INSIGHTS_SCHEMA = ExtractionSchema.of(
    Section(
        "insights",
        LIST,
        aliases=("key insights", "findings", "takeaways"),
        text_parser=parse_list_items_from_text,
    ),
)

TOPIC_CLUSTERS_SCHEMA = ExtractionSchema.of(
    Section(
        "clusters",
        RECORDS,
        aliases=("topic clusters", "topics"),
        record_factory=cluster_record,
        text_parser=parse_clusters_from_text,
    ),
)
