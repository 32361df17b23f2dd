from __future__ import annotations

import json

import pytest

from fakes import ScriptedGenerator, StaticDocumentStore
from knowsynth.analysis import AnalysisCache, DocumentAnalysisService, FanOutOrchestrator, GenerativeAnalyst
from knowsynth.errors import BackendError

DOCUMENTS = [
    {"name": "fileSearchStores/a/documents/1", "displayName": "Budget 2023"},
    {"name": "fileSearchStores/a/documents/2", "displayName": "Budget 2024"},
    {"name": "fileSearchStores/a/documents/3"},
]

SCRIPT = {
    "extract the main topics": json.dumps([{"name": "Budgeting", "frequency": "high"}]),
    "Extract all action items": "1. Approve the budget (high)\n2. Share minutes",
    "Generate concise summaries": json.dumps({"summaries": [{"documentName": "1", "title": "Budget 2023"}]}),
    "Analyze relationships": "Documents 1 and 2 look related.",
    "detect trends over time": json.dumps({"emergingTopics": ["AI"], "evolution": "More automation."}),
    "provide comprehensive insights": json.dumps({"topics": ["Budgeting"], "importantInfo": "Deadline in May"}),
    "detect patterns": "Content Patterns: quarterly reports, budget reviews",
}


def _service(generator, documents=DOCUMENTS, **kwargs):
    store = StaticDocumentStore(documents)
    orchestrator = FanOutOrchestrator(AnalysisCache())
    service = DocumentAnalysisService(GenerativeAnalyst(generator), store, orchestrator, page_size=2, **kwargs)
    return service, store


@pytest.mark.asyncio
async def test_analyze_store_builds_every_section():
    generator = ScriptedGenerator(SCRIPT)
    service, store = _service(generator)
    report = await service.analyze_store("fileSearchStores/a")

    assert list(report) == ["summaries", "topics", "relationships", "actionItems", "trends", "insights", "patterns"]
    assert report["topics"] == [{"name": "Budgeting", "frequency": "high"}]
    assert report["summaries"] == [{"documentName": "1", "title": "Budget 2023"}]
    assert [item["description"] for item in report["actionItems"]] == ["Approve the budget (high)", "Share minutes"]
    assert report["trends"]["emergingTopics"] == ["AI"]
    assert report["trends"]["increasingTopics"] == []
    assert report["insights"]["importantInfo"] == "Deadline in May"
    assert report["patterns"]["contentPatterns"] == ["quarterly reports", "budget reviews"]
    # paging followed every nextPageToken
    assert [call[2] for call in store.calls] == [None, "2"]


@pytest.mark.asyncio
async def test_relationships_fall_back_to_name_matching():
    service, _ = _service(ScriptedGenerator(SCRIPT))
    report = await service.analyze_store("fileSearchStores/a")
    assert report["relationships"] == [
        {
            "document1": "fileSearchStores/a/documents/1",
            "document2": "fileSearchStores/a/documents/2",
            "relationshipType": "similar",
            "strength": "medium",
            "description": "Documents with similar names",
        }
    ]


@pytest.mark.asyncio
async def test_summaries_fall_back_to_document_stubs():
    script = dict(SCRIPT)
    script["Generate concise summaries"] = "All three documents discuss money."
    service, _ = _service(ScriptedGenerator(script), summary_max_documents=2)
    summaries = await service.generate_document_summaries("fileSearchStores/a", DOCUMENTS)
    assert [summary["title"] for summary in summaries] == ["Budget 2023", "Budget 2024"]
    assert summaries[0]["takeaways"] == "All three documents discuss money."
    assert summaries[0]["purpose"] == "Document in knowledge base"

    stub = await service.generate_document_summaries("fileSearchStores/a", [{"name": "d"}])
    assert stub[0]["title"] == "Document 1"


@pytest.mark.asyncio
async def test_failed_sections_use_their_fallbacks():
    script = dict(SCRIPT)
    script["extract the main topics"] = BackendError("quota")
    script["provide comprehensive insights"] = BackendError("invalid key")
    script["detect patterns"] = BackendError("timeout")
    script["detect trends over time"] = BackendError("timeout")
    service, _ = _service(ScriptedGenerator(script))

    report = await service.analyze_store("fileSearchStores/a")

    assert report["topics"] == []
    assert report["insights"] == {"error": "invalid key"}
    assert report["patterns"] is None
    assert report["trends"] == {
        "increasingTopics": [],
        "decreasingTopics": [],
        "emergingTopics": [],
        "decliningTopics": [],
        "evolution": "",
    }
    assert report["summaries"]


@pytest.mark.asyncio
async def test_cached_report_skips_document_listing():
    generator = ScriptedGenerator(SCRIPT)
    service, store = _service(generator)
    first = await service.analyze_store("fileSearchStores/a")
    calls_after_first = len(generator.calls)
    second = await service.analyze_store("fileSearchStores/a")
    assert first == second
    assert len(generator.calls) == calls_after_first
    assert len(store.calls) == 2

    await service.analyze_store("fileSearchStores/a", use_cache=False)
    assert len(generator.calls) == 2 * calls_after_first


@pytest.mark.asyncio
async def test_clear_cache_forces_reanalysis():
    generator = ScriptedGenerator(SCRIPT)
    service, _ = _service(generator)
    await service.analyze_store("fileSearchStores/a")
    service.clear_cache("fileSearchStores/a")
    await service.analyze_store("fileSearchStores/a")
    assert len(generator.prompts_containing("extract the main topics")) == 2


@pytest.mark.asyncio
async def test_empty_store_returns_zero_report_without_generation():
    generator = ScriptedGenerator(SCRIPT)
    service, _ = _service(generator, documents=[])
    report = await service.analyze_store("fileSearchStores/empty")
    assert report == DocumentAnalysisService.empty_report()
    assert report["topics"] == []
    assert generator.calls == []


@pytest.mark.asyncio
async def test_listing_failure_propagates():
    store = StaticDocumentStore(error=BackendError("store not found", status_code=404))
    service = DocumentAnalysisService(GenerativeAnalyst(ScriptedGenerator(SCRIPT)), store, FanOutOrchestrator())
    with pytest.raises(BackendError):
        await service.analyze_store("fileSearchStores/missing")


@pytest.mark.asyncio
async def test_single_calls_propagate_backend_errors():
    service, _ = _service(ScriptedGenerator({"extract the main topics": BackendError("quota")}))
    with pytest.raises(BackendError):
        await service.extract_topics("fileSearchStores/a")


@pytest.mark.asyncio
async def test_synthesize_knowledge_spans_stores():
    generator = ScriptedGenerator(default="Combined answer")
    service, _ = _service(generator)
    text = await service.synthesize_knowledge(["s1", "s2"], "What changed?")
    assert text == "Combined answer"
    stores, prompt = generator.calls[0]
    assert stores == ["s1", "s2"]
    assert "Query: What changed?" in prompt
