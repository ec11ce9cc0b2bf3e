"""
Tests for the FastAPI application and its routers.
"""

import asyncio
import json

import httpx
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from assistant.agents import WebContentFetcher, build_default_agents
from assistant.brain.store import InMemoryBrainRepository
from assistant.enrichment.build import create_enrichment_graph
from assistant.enrichment.enrichment_api import set_graph
from assistant.main import app
from assistant.orchestration import assistant_api
from assistant.orchestration.assistant_api import run_assistant, set_orchestrator
from assistant.orchestration.orchestrator import AssistantOrchestrator
from assistant.orchestration.schemas import AssistantRequest


# ============================================================================
# Test Fixtures
# ============================================================================


RESPONSES = {
    "You are an analyst": {"objective": "Organize the team offsite"},
    "task breakdown agent": {"tasks": [{"id": "T1", "title": "Book venue"}]},
    "research planning agent": {"researchPlan": {"searchTerms": ["offsite ideas"]}},
    "prioritization and scheduling": {"prioritizedTasks": [{"taskId": "T1", "priority": "must"}]},
    "final assembler": {"successCriteria": ["Venue booked"]},
    "analyze tasks on a kanban": {"tags": ["events"], "priority": "high"},
}


def _scripted_llm(counter, delay=0.0):
    async def llm(messages, model):
        system = messages[0]["content"]
        counter.append(system)
        if delay:
            await asyncio.sleep(delay)
        for marker, response in RESPONSES.items():
            if marker in system:
                return json.dumps(response)
        raise AssertionError(f"Unexpected prompt: {system[:60]}")

    return llm


@pytest.fixture
def llm_calls():
    return []


@pytest.fixture
def client(llm_calls):
    fetcher = WebContentFetcher(
        transport=httpx.MockTransport(lambda request: httpx.Response(404, text="missing"))
    )
    repository = InMemoryBrainRepository()
    set_orchestrator(
        AssistantOrchestrator(
            agents=build_default_agents(llm=_scripted_llm(llm_calls), fetcher=fetcher),
            repository=repository,
        )
    )
    set_graph(create_enrichment_graph(llm=_scripted_llm(llm_calls), fetcher=fetcher))
    try:
        yield TestClient(app)
    finally:
        set_orchestrator(None)
        set_graph(None)


# ============================================================================
# App
# ============================================================================


class TestApp:
    """Tests for the root endpoints."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root_lists_pipelines(self, client):
        body = client.get("/").json()

        assert set(body["pipelines"]) == {"assistant", "enrichment"}


# ============================================================================
# Assistant API
# ============================================================================


class TestAssistantApi:
    """Tests for /api/assistant."""

    def test_run_returns_camel_case_response(self, client):
        response = client.post(
            "/api/assistant/run",
            json={"requestId": "r-1", "task": "Organize the offsite", "projectId": "p-1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["requestId"] == "r-1"
        assert body["success"] is True
        assert body["result"]["successCriteria"] == ["Venue booked"]
        assert body["result"]["todoList"][0]["priority"] == "must"
        assert body["progress"][-1]["stage"] == "completed"
        assert "error" not in body

    def test_blank_task_rejected(self, client):
        response = client.post("/api/assistant/run", json={"requestId": "r-2", "task": "  "})

        assert response.status_code == 422

    def test_repeated_request_id_is_not_rerun(self, client, llm_calls):
        payload = {"requestId": "r-3", "task": "Organize the offsite"}

        first = client.post("/api/assistant/run", json=payload).json()
        calls_after_first = len(llm_calls)
        second = client.post("/api/assistant/run", json=payload).json()

        assert second == first
        assert len(llm_calls) == calls_after_first

    def test_brain_lifecycle(self, client):
        client.post(
            "/api/assistant/run",
            json={"requestId": "r-4", "task": "Organize the offsite", "projectId": "p-4"},
        )

        brain = client.get("/api/assistant/brain/p-4")
        assert brain.status_code == 200
        assert brain.json()["taskBacklog"][0]["id"] == "T1"

        deleted = client.delete("/api/assistant/brain/p-4")
        assert deleted.json() == {"status": "deleted", "project_id": "p-4"}
        assert client.get("/api/assistant/brain/p-4").status_code == 404
        assert client.delete("/api/assistant/brain/p-4").status_code == 404


class TestRequestDelivery:
    """Tests for delivering one response per request id."""

    @pytest.fixture
    def slow_llm_calls(self):
        calls = []
        set_orchestrator(
            AssistantOrchestrator(
                agents=build_default_agents(
                    llm=_scripted_llm(calls, delay=0.01),
                    fetcher=WebContentFetcher(
                        transport=httpx.MockTransport(lambda request: httpx.Response(404))
                    ),
                ),
                repository=InMemoryBrainRepository(),
            )
        )
        try:
            yield calls
        finally:
            set_orchestrator(None)

    @pytest.mark.asyncio
    async def test_concurrent_deliveries_share_one_run(self, slow_llm_calls):
        request = AssistantRequest(request_id="dup-1", task="Organize the offsite")

        first, second = await asyncio.gather(run_assistant(request), run_assistant(request))

        analyst_calls = [s for s in slow_llm_calls if "You are an analyst" in s]
        assert len(analyst_calls) == 1
        assert first == second
        assert "dup-1" not in assistant_api._in_flight

    @pytest.mark.asyncio
    async def test_stored_responses_are_bounded(self, slow_llm_calls, monkeypatch):
        monkeypatch.setattr(assistant_api, "MAX_STORED_RESPONSES", 2)

        for request_id in ("b-1", "b-2", "b-3"):
            await run_assistant(AssistantRequest(request_id=request_id, task="Organize the offsite"))

        assert list(assistant_api._responses) == ["b-2", "b-3"]

    @pytest.mark.asyncio
    async def test_failed_run_is_retried(self, slow_llm_calls, monkeypatch):
        orchestrator = assistant_api.get_orchestrator()
        process = orchestrator.process
        attempts = []

        async def flaky(request):
            attempts.append(request.request_id)
            if len(attempts) == 1:
                raise RuntimeError("store unavailable")
            return await process(request)

        monkeypatch.setattr(orchestrator, "process", flaky)
        request = AssistantRequest(request_id="retry-1", task="Organize the offsite")

        with pytest.raises(HTTPException) as excinfo:
            await run_assistant(request)
        response = await run_assistant(request)

        assert excinfo.value.status_code == 500
        assert response.success is True
        assert attempts == ["retry-1", "retry-1"]


# ============================================================================
# Enrichment API
# ============================================================================


class TestEnrichmentApi:
    """Tests for /api/enrichment."""

    def test_task_without_link(self, client):
        response = client.post(
            "/api/enrichment/run", json={"taskId": "k-1", "title": "Plan the team offsite"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "complete"
        assert body["taskAnalysis"]["tags"] == ["events"]
        assert body["taskAnalysis"]["priority"] == "high"
        assert body["webContent"] is None

    def test_unreachable_link_reports_error_status(self, client):
        response = client.post(
            "/api/enrichment/run",
            json={"taskId": "k-2", "title": "Read https://example.com/agenda"},
        )

        body = response.json()
        assert body["status"] == "error"
        assert body["errors"] == ["Web content agent error: HTTP 404"]
        assert body["taskAnalysis"] is not None
