from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from fakes import ScriptedGenerator
from knowsynth.analysis import GenerativeAnalyst, NoteService
from knowsynth.analysis.notes import NO_NOTES_TEXT, NO_SUMMARY_TEXT, NO_SYNTHESIS_TEXT, notes_prompt
from knowsynth.errors import BackendError
from knowsynth.extraction.records import parse_clusters_from_text, parse_list_items_from_text

DOCUMENTS = ["docs/budget", "docs/hiring"]


def _notes(generator) -> NoteService:
    return NoteService(GenerativeAnalyst(generator))


def test_notes_prompt_names_requested_sections_and_documents():
    single = notes_prompt(DOCUMENTS, ["summary"])
    assert "provide ONLY a summary section" in single
    assert "1. docs/budget\n2. docs/hiring" in single

    several = notes_prompt(DOCUMENTS, ["key_points", "topics"])
    assert "ONLY the following sections: key points, main topics and themes" in several

    assert notes_prompt(DOCUMENTS, []).startswith("Analyze the following documents and provide insights.")


def test_list_and_cluster_text_fallbacks():
    text = "Findings:\n- Costs rose 4%\n2. Hiring slowed\n"
    assert parse_list_items_from_text(text) == ["Costs rose 4%", "Hiring slowed"]
    assert parse_list_items_from_text("One plain sentence.") == ["One plain sentence."]
    assert parse_list_items_from_text("  ") == []
    clusters = parse_clusters_from_text("- Finance: budget and costs\n- People")
    assert [(c["name"], c["description"]) for c in clusters] == [("Finance", "budget and costs"), ("People", "")]


@pytest.mark.asyncio
async def test_generate_notes_scopes_prompt_and_defaults_empty_text():
    generator = ScriptedGenerator(default="")
    service = _notes(generator)
    assert await service.generate_notes("s1", DOCUMENTS, include_key_points=False) == NO_NOTES_TEXT
    prompt = generator.calls[0][1]
    assert "summary, action items, main topics and themes" in prompt
    assert generator.calls[0][0] == ["s1"]


@pytest.mark.asyncio
async def test_key_insights_and_clusters_are_structured():
    generator = ScriptedGenerator(
        {
            "Extract the most important insights": json.dumps({"insights": ["Costs rose", "Hiring slowed"]}),
            "cluster the main topics": "- Finance: budget\n- People: hiring",
        }
    )
    service = _notes(generator)
    assert await service.extract_key_insights("s1", DOCUMENTS) == ["Costs rose", "Hiring slowed"]
    clusters = await service.cluster_topics("s1", DOCUMENTS)
    assert [cluster["name"] for cluster in clusters] == ["Finance", "People"]


@pytest.mark.asyncio
async def test_comprehensive_notes_fall_back_per_section():
    generator = ScriptedGenerator(
        {
            "provide ONLY a summary": "Budget and hiring plans.",
            "provide ONLY a key points": "- Budget is flat\n- Two hires",
            "Extract all action items, tasks, and next steps": json.dumps([{"description": "Post the job ad"}]),
            "Synthesize information": BackendError("quota"),
            "Extract the most important insights": BackendError("quota"),
        },
        default="",
    )
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    notes = await _notes(generator).generate_comprehensive_notes("s1", DOCUMENTS, now=now)

    assert notes["summary"] == "Budget and hiring plans."
    assert notes["keyPoints"] == ["Budget is flat", "Two hires"]
    assert [item["description"] for item in notes["actionItems"]] == ["Post the job ad"]
    assert notes["insights"] == []
    assert notes["synthesis"] == NO_SYNTHESIS_TEXT
    assert notes["topics"] == []
    assert notes["failedSections"] == ["insights", "synthesis"]
    assert notes["generatedAt"] == "2024-05-01T00:00:00+00:00"
    assert notes["documentCount"] == 2
    assert len(generator.calls) == 6


@pytest.mark.asyncio
async def test_comprehensive_notes_require_documents():
    with pytest.raises(ValueError):
        await _notes(ScriptedGenerator()).generate_comprehensive_notes("s1", [])


@pytest.mark.asyncio
async def test_empty_summary_uses_default_text():
    assert await _notes(ScriptedGenerator(default="   ")).summarize_documents("s1", DOCUMENTS) == NO_SUMMARY_TEXT
