"""
End-to-end tests for the assistant orchestrator.

Every agent runs for real against a scripted LLM and a mocked HTTP
transport, so these tests exercise analysis, the job graph, merges,
progress reporting and final assembly together.
"""

import asyncio
import json

import httpx
import pytest

from assistant.agents import WebContentFetcher, build_default_agents
from assistant.brain.store import InMemoryBrainRepository
from assistant.orchestration.config import AssistantConfig
from assistant.orchestration.errors import GraphConstructionError
from assistant.orchestration.orchestrator import AssistantOrchestrator
from assistant.orchestration.schemas import AssistantRequest, FailurePolicy, JobSpec
from assistant.shared.contracts import agent_ids


# ============================================================================
# Test Fixtures
# ============================================================================


ARTICLE_HTML = (
    "<html><head><title>Review Guide</title></head><body><main>"
    "<p>A quarterly review is a meeting where the team looks back at 3 months of results.</p>"
    "</main></body></html>"
)


def _default_responses():
    """Scripted LLM responses keyed by a marker from each system prompt."""
    return {
        "You are an analyst": {
            "objective": "Prepare the quarterly review",
            "context": {"audience": "leadership"},
            "openQuestions": [{"question": "Slides or memo?", "options": ["Slides", "Memo"]}],
            "risks": [{"risk": "Metrics arrive late", "mitigation": "Ask early"}],
        },
        "task breakdown agent": {
            "tasks": [
                {"id": "T1", "title": "Collect metrics", "type": "research", "effort": "30m"},
                {"id": "T2", "title": "Write the review", "dependencies": ["T1"]},
            ]
        },
        "research planning agent": {
            "researchPlan": {
                "guidingQuestions": ["What makes a good review?"],
                "searchTerms": ["https://docs.example.com/review"],
            }
        },
        "prioritization and scheduling": {
            "prioritizedTasks": [
                {"taskId": "T1", "priority": "must", "order": 1},
                {"taskId": "T2", "priority": "should", "order": 2, "estimatedTime": "2h"},
            ],
            "schedule": {"today": ["T1"], "thisWeek": ["T2"]},
            "nextActions": [{"taskId": "T1", "description": "Export the dashboard"}],
        },
        "Compare the options": {"criteria": ["effort"], "recommendation": "Memo"},
        "final assembler": "The plan is ready.",
    }


def _scripted_llm(responses):
    async def llm(messages, model):
        system = messages[0]["content"]
        for marker, response in responses.items():
            if marker in system:
                if isinstance(response, Exception):
                    raise response
                return response if isinstance(response, str) else json.dumps(response)
        raise AssertionError(f"Unexpected prompt: {system[:60]}")

    return llm


def _fetcher():
    def handler(request):
        if str(request.url) == "https://docs.example.com/review":
            return httpx.Response(200, headers={"content-type": "text/html"}, text=ARTICLE_HTML)
        return httpx.Response(404, text="missing")

    return WebContentFetcher(transport=httpx.MockTransport(handler))


def _make_orchestrator(responses=None, repository=None, config=None, graph=None):
    agents = build_default_agents(
        llm=_scripted_llm(responses or _default_responses()), fetcher=_fetcher()
    )
    kwargs = {"agents": agents, "repository": repository, "config": config}
    if graph is not None:
        kwargs["graph"] = graph
    return AssistantOrchestrator(**kwargs)


def _make_request(request_id="req-1", **overrides):
    return AssistantRequest(request_id=request_id, task="Prepare the Q3 review", **overrides)


# ============================================================================
# Full runs
# ============================================================================


class TestFullRun:
    """Tests for a complete successful run."""

    @pytest.mark.asyncio
    async def test_waves_follow_dependencies(self):
        result = await _make_orchestrator().process(_make_request())

        assert result.scheduler["waves"] == [
            ["task-breakdown", "research-planning"],
            ["web-research", "prioritization"],
            ["decision-support"],
        ]
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_brain_collects_every_agent_contribution(self):
        result = await _make_orchestrator().process(_make_request())
        brain = result.local_brain

        assert brain.objective == "Prepare the quarterly review"
        assert [t.id for t in brain.task_backlog] == ["T1", "T2"]
        assert brain.task_backlog[1].effort == "2h"
        assert [s.url for s in brain.sources] == ["https://docs.example.com/review"]
        assert brain.decisions[0].question == "Slides or memo?"
        assert brain.decisions[0].recommendation == "Memo"
        assert set(result.agent_outputs) == {
            agent_ids.ANALYST,
            agent_ids.TASK_BREAKDOWN,
            agent_ids.RESEARCH_PLANNER,
            agent_ids.WEB_RESEARCHER,
            agent_ids.PRIORITIZER_SCHEDULER,
            agent_ids.DECISION_SUPPORT,
        }

    @pytest.mark.asyncio
    async def test_response_carries_fallback_deliverable(self):
        result = await _make_orchestrator().process(_make_request())
        response = result.to_response()

        assert response.success is True
        assert response.error is None
        deliverable = response.result
        assert [(t.id, t.priority, t.schedule_bucket) for t in deliverable.todo_list] == [
            ("T1", "must", "today"),
            ("T2", "should", "this_week"),
        ]
        assert deliverable.next_actions[0].description == "Export the dashboard"
        assert deliverable.research_summary.sources[0].title == "Review Guide"

    @pytest.mark.asyncio
    async def test_progress_stages_in_order(self):
        result = await _make_orchestrator().process(_make_request())

        stages = [event.stage for event in result.progress]
        assert stages == [
            "analysis",
            "local-brain-prep",
            "task-breakdown",
            "research-planning",
            "web-research",
            "prioritization",
            "decision-support",
            "final-assembly",
            "completed",
        ]
        assert [e.progress for e in result.progress] == sorted(e.progress for e in result.progress)
        assert all(e.request_id == "req-1" for e in result.progress)

    @pytest.mark.asyncio
    async def test_no_open_questions_skips_decision_support(self):
        responses = _default_responses()
        responses["You are an analyst"] = {"objective": "Prepare the quarterly review"}

        result = await _make_orchestrator(responses).process(_make_request())

        assert "decision-support" not in [e.stage for e in result.progress]
        assert result.local_brain.decisions == []
        assert len(result.scheduler["waves"]) == 2


# ============================================================================
# Failures
# ============================================================================


class TestFailures:
    """Tests for runs where agents fail."""

    @pytest.mark.asyncio
    async def test_failed_job_is_collected_and_run_continues(self):
        responses = _default_responses()
        responses["task breakdown agent"] = RuntimeError("model overloaded")

        result = await _make_orchestrator(responses).process(_make_request())
        response = result.to_response()

        assert result.scheduler["failed"] == ["task-breakdown"]
        assert "prioritization" in result.scheduler["succeeded"]
        assert response.success is True
        assert response.errors == ["Job task-breakdown (task-breakdown) failed: model overloaded"]
        assert response.error == response.errors[0]
        assert agent_ids.TASK_BREAKDOWN not in result.agent_outputs

    @pytest.mark.asyncio
    async def test_skip_policy_skips_dependents(self):
        responses = _default_responses()
        responses["task breakdown agent"] = RuntimeError("model overloaded")
        config = AssistantConfig(failure_policy=FailurePolicy.SKIP_DEPENDENTS)

        result = await _make_orchestrator(responses, config=config).process(_make_request())

        assert result.scheduler["skipped"] == ["prioritization"]
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_analysis_failure_degrades(self):
        responses = _default_responses()
        responses["You are an analyst"] = ConnectionError("no network")

        result = await _make_orchestrator(responses).process(_make_request())

        assert result.errors[0] == "Analysis failed: no network"
        assert result.analyst.success is False
        assert result.local_brain.objective == "Prepare the Q3 review"
        assert result.final_assembler.success is True
        assert "decision-support" not in result.scheduler["succeeded"]

    @pytest.mark.asyncio
    async def test_assembly_failure_fails_response(self):
        responses = _default_responses()
        responses["final assembler"] = RuntimeError("assembler down")

        result = await _make_orchestrator(responses).process(_make_request())
        response = result.to_response()

        assert response.success is False
        assert response.result is None
        assert "Final assembly failed: assembler down" in response.error
        assert result.progress[-1].stage == "error"

    @pytest.mark.asyncio
    async def test_malformed_graph_raises(self):
        graph = (JobSpec(id="x", agent_id=agent_ids.TASK_BREAKDOWN, dependencies=("missing",)),)

        with pytest.raises(GraphConstructionError):
            await _make_orchestrator(graph=graph).process(_make_request())

    @pytest.mark.asyncio
    async def test_graph_with_unknown_stage_raises_before_running(self):
        graph = (JobSpec(id="x", agent_id=agent_ids.TASK_BREAKDOWN, stage="drafting"),)
        progress = []

        with pytest.raises(GraphConstructionError, match="unknown stage"):
            await _make_orchestrator(graph=graph).process(
                _make_request(), on_progress=progress.append
            )

        assert "task-breakdown" not in [event.stage for event in progress]


# ============================================================================
# Progress listeners and persistence
# ============================================================================


class TestProgressListener:
    """Tests for listener delivery during a run."""

    @pytest.mark.asyncio
    async def test_async_listener_receives_every_event(self):
        received = []

        async def listener(event):
            received.append(event.stage)

        result = await _make_orchestrator().process(_make_request(), on_progress=listener)
        await asyncio.sleep(0)

        assert received == [e.stage for e in result.progress]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_run(self):
        def listener(event):
            raise RuntimeError("socket closed")

        result = await _make_orchestrator().process(_make_request(), on_progress=listener)

        assert result.to_response().success is True
        assert result.errors == []


class TestPersistence:
    """Tests for project brains across runs."""

    @pytest.mark.asyncio
    async def test_project_brain_persists_between_runs(self):
        repository = InMemoryBrainRepository()
        orchestrator = _make_orchestrator(repository=repository)

        first = await orchestrator.process(_make_request("req-1", project_id="proj"))
        second = await orchestrator.process(_make_request("req-2", project_id="proj"))

        stored = repository.load("proj")
        assert len(stored.history) == len(first.local_brain.history) * 2
        assert len({entry.run_id for entry in stored.history}) == 2
        assert len(stored.decisions) == 1
        assert set(second.agent_outputs) == set(first.agent_outputs)

    @pytest.mark.asyncio
    async def test_requests_without_project_are_not_saved(self):
        repository = InMemoryBrainRepository()

        await _make_orchestrator(repository=repository).process(_make_request())

        assert repository._brains == {}
