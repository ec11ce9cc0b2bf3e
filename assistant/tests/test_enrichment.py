"""
Tests for the task enrichment pipeline.

Tests routing, URL discovery and the compiled graph end to end with a
scripted LLM and a mocked HTTP transport.
"""

import json

import httpx
import pytest

from assistant.agents.content_summarizer import ContentSummarizerAgent
from assistant.agents.task_analyzer import TaskAnalyzerAgent
from assistant.agents.web_content import WebContentFetcher
from assistant.enrichment.build import create_enrichment_graph, create_initial_state
from assistant.enrichment.nodes import find_task_url
from assistant.enrichment.router import route_next_node
from assistant.enrichment.schemas import EnrichmentRequest


# ============================================================================
# Test Fixtures
# ============================================================================


PAGE_HTML = (
    "<html><head><title>Async IO in Python</title></head><body><article>"
    "<p>asyncio is a library to write concurrent code using the async and await syntax.</p>"
    "</article></body></html>"
)

SUMMARY = {
    "summary": "An introduction to asyncio.",
    "keyPoints": ["Event loop", "Coroutines"],
}

ANALYSIS = {
    "context": "Learning backlog",
    "tags": ["Python", "asyncio", "python"],
    "priority": "Medium",
    "estimatedDuration": "1h",
    "suggestedTitle": "Read the asyncio guide",
}


def _scripted_llm(summary=SUMMARY, analysis=ANALYSIS):
    calls = []

    async def llm(messages, model):
        system = messages[0]["content"]
        calls.append(system)
        if "summarize web pages" in system:
            response = summary
        elif "analyze tasks on a kanban" in system:
            response = analysis
        else:
            raise AssertionError(f"Unexpected prompt: {system[:60]}")
        if isinstance(response, Exception):
            raise response
        return response if isinstance(response, str) else json.dumps(response)

    llm.calls = calls
    return llm


def _fetcher(status=200, body=PAGE_HTML):
    def handler(request):
        return httpx.Response(status, headers={"content-type": "text/html"}, text=body)

    return WebContentFetcher(transport=httpx.MockTransport(handler))


def _make_state(**overrides):
    state = create_initial_state(
        EnrichmentRequest(task_id="task-1", title="Read up on asyncio"), session_id="s-1"
    )
    state.update(overrides)
    return state


async def _run(request, llm=None, fetcher=None):
    graph = create_enrichment_graph(llm=llm or _scripted_llm(), fetcher=fetcher or _fetcher())
    return await graph.ainvoke(create_initial_state(request, session_id="s-1"))


# ============================================================================
# URL discovery and routing
# ============================================================================


class TestFindTaskUrl:
    """Tests for locating the URL a task links to."""

    def test_metadata_url_wins(self):
        url = find_task_url(
            "See https://a.example/x", None, {"url": "https://b.example/y"}
        )

        assert url == "https://b.example/y"

    def test_first_url_in_title_then_description(self):
        assert find_task_url("Read https://a.example/x.", "https://b.example") == "https://a.example/x"
        assert find_task_url("Read this", "Link: (https://b.example/doc)") == "https://b.example/doc"

    def test_invalid_metadata_url_ignored(self):
        assert find_task_url("No link", None, {"url": "not a url"}) is None


class TestRouting:
    """Tests for route_next_node."""

    def test_url_routes_to_fetch(self):
        assert route_next_node(_make_state(url="https://a.example")) == "fetch_node"

    def test_no_url_routes_to_analyze(self):
        assert route_next_node(_make_state()) == "analyze_node"

    def test_fetched_content_routes_to_summarize(self):
        state = _make_state(
            url="https://a.example",
            fetch_attempted=True,
            web_content={"success": True, "textContent": "some text"},
        )

        assert route_next_node(state) == "summarize_node"

    def test_failed_fetch_routes_to_analyze(self):
        state = _make_state(
            url="https://a.example",
            fetch_attempted=True,
            web_content={"success": False, "textContent": None},
        )

        assert route_next_node(state) == "analyze_node"

    def test_everything_attempted_routes_to_complete(self):
        state = _make_state(analyze_attempted=True)

        assert route_next_node(state) == "complete"


# ============================================================================
# Agents
# ============================================================================


class TestEnrichmentAgents:
    """Tests for the summarizer and analyzer agents."""

    @pytest.mark.asyncio
    async def test_summarizer_rejects_empty_content(self):
        result = await ContentSummarizerAgent(llm=_scripted_llm()).summarize("   ")

        assert result.success is False

    @pytest.mark.asyncio
    async def test_summarizer_counts_words(self):
        result = await ContentSummarizerAgent(llm=_scripted_llm()).summarize("one two three", "T")

        assert result.summary == "An introduction to asyncio."
        assert result.word_count == 3

    @pytest.mark.asyncio
    async def test_analyzer_normalizes_tags_and_priority(self):
        result = await TaskAnalyzerAgent(llm=_scripted_llm()).analyze_task("Read up on asyncio")

        assert result.tags == ["python", "asyncio"]
        assert result.priority == "medium"
        assert result.estimated_duration == "1h"

    @pytest.mark.asyncio
    async def test_analyzer_drops_unchanged_suggestions(self):
        analysis = dict(ANALYSIS, suggestedTitle="Read up on asyncio")

        result = await TaskAnalyzerAgent(llm=_scripted_llm(analysis=analysis)).analyze_task(
            "Read up on asyncio"
        )

        assert result.suggested_title is None


# ============================================================================
# Graph
# ============================================================================


class TestEnrichmentGraph:
    """Tests for the compiled enrichment graph."""

    @pytest.mark.asyncio
    async def test_task_with_url_runs_every_stage(self):
        request = EnrichmentRequest(
            task_id="task-1", title="Read https://docs.python.org/3/library/asyncio.html"
        )

        state = await _run(request)

        assert state["current_node"] == "complete"
        assert state["errors"] == []
        assert state["web_content"]["title"] == "Async IO in Python"
        assert state["content_summary"]["keyPoints"] == ["Event loop", "Coroutines"]
        assert state["task_analysis"]["tags"] == ["python", "asyncio"]

    @pytest.mark.asyncio
    async def test_linked_task_summarizes_then_analyzes(self):
        llm = _scripted_llm()
        request = EnrichmentRequest(task_id="t", title="x", metadata={"url": "https://a.example"})

        await _run(request, llm=llm)

        assert len(llm.calls) == 2
        assert "summarize web pages" in llm.calls[0]
        assert "analyze tasks on a kanban" in llm.calls[1]

    @pytest.mark.asyncio
    async def test_task_without_url_only_analyzes(self):
        llm = _scripted_llm()

        state = await _run(EnrichmentRequest(task_id="t", title="Plan sprint"), llm=llm)

        assert state["web_content"] is None
        assert state["content_summary"] is None
        assert state["task_analysis"]["priority"] == "medium"
        assert len(llm.calls) == 1

    @pytest.mark.asyncio
    async def test_failed_fetch_still_analyzes(self):
        request = EnrichmentRequest(task_id="t", title="Read https://a.example/gone")

        state = await _run(request, fetcher=_fetcher(status=404))

        assert state["errors"] == ["Web content agent error: HTTP 404"]
        assert state["content_summary"] is None
        assert state["task_analysis"] is not None
        assert state["current_node"] == "complete"

    @pytest.mark.asyncio
    async def test_analyzer_failure_is_collected(self):
        llm = _scripted_llm(analysis=RuntimeError("quota"))

        state = await _run(EnrichmentRequest(task_id="t", title="Plan sprint"), llm=llm)

        assert state["errors"] == ["Task analyzer error: quota"]
        assert state["task_analysis"] is None
        assert state["current_node"] == "complete"
