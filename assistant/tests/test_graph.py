"""
Tests for job graph construction and agent-backed jobs.
"""

import pytest

from assistant.brain.schemas import OpenQuestion, create_brain
from assistant.brain.store import BrainSession
from assistant.orchestration.errors import AgentFailedError, GraphConstructionError
from assistant.orchestration.graph import (
    ASSISTANT_GRAPH,
    build_assistant_jobs,
    build_jobs,
    has_open_questions,
)
from assistant.orchestration.schemas import JobSpec
from assistant.shared.contracts import TaskBreakdownResult, agent_ids


# ============================================================================
# Test Fixtures
# ============================================================================


def _noop_factory(spec):
    async def run():
        return spec.id

    return run


class _StubAgent:
    """Agent double returning a fixed result."""

    def __init__(self, result):
        self.result = result
        self.seen = []

    async def run(self, brain):
        self.seen.append(brain)
        return self.result


def _make_agents(**overrides):
    agents = {spec.agent_id: _StubAgent(None) for spec in ASSISTANT_GRAPH}
    agents.update(overrides)
    return agents


# ============================================================================
# build_jobs
# ============================================================================


class TestBuildJobs:
    """Tests for turning specs into jobs."""

    def test_assistant_graph_without_open_questions_omits_decision_support(self):
        brain = create_brain("Ship the release")

        jobs = build_jobs(ASSISTANT_GRAPH, brain, _noop_factory)

        assert [j.id for j in jobs] == [
            "task-breakdown",
            "research-planning",
            "web-research",
            "prioritization",
        ]

    def test_assistant_graph_with_open_questions_includes_decision_support(self):
        brain = create_brain("Ship the release")
        brain.open_questions.append(OpenQuestion(question="Which CI provider?"))

        jobs = build_jobs(ASSISTANT_GRAPH, brain, _noop_factory)
        by_id = {j.id: j for j in jobs}

        assert by_id["decision-support"].dependencies == frozenset({"web-research"})
        assert by_id["web-research"].dependencies == frozenset({"research-planning"})
        assert by_id["prioritization"].dependencies == frozenset({"task-breakdown"})

    def test_dependency_on_unknown_job_rejected(self):
        specs = (JobSpec(id="a", agent_id="x", dependencies=("missing",)),)

        with pytest.raises(GraphConstructionError, match="missing"):
            build_jobs(specs, create_brain("goal"), _noop_factory)

    def test_dependency_on_omitted_conditional_job_rejected(self):
        specs = (
            JobSpec(id="a", agent_id="x", condition=lambda brain: False),
            JobSpec(id="b", agent_id="y", dependencies=("a",)),
        )

        with pytest.raises(GraphConstructionError):
            build_jobs(specs, create_brain("goal"), _noop_factory)

    def test_duplicate_spec_ids_rejected(self):
        specs = (JobSpec(id="a", agent_id="x"), JobSpec(id="a", agent_id="y"))

        with pytest.raises(GraphConstructionError, match="Duplicate"):
            build_jobs(specs, create_brain("goal"), _noop_factory)

    def test_unknown_progress_stage_rejected(self):
        specs = (JobSpec(id="a", agent_id="x", stage="drafting"),)

        with pytest.raises(GraphConstructionError, match="drafting"):
            build_jobs(specs, create_brain("goal"), _noop_factory)

    def test_job_without_stage_accepted(self):
        jobs = build_jobs((JobSpec(id="a", agent_id="x"),), create_brain("goal"), _noop_factory)

        assert [job.id for job in jobs] == ["a"]

    def test_has_open_questions(self):
        brain = create_brain("goal")
        assert has_open_questions(brain) is False
        brain.open_questions.append(OpenQuestion(question="When?"))
        assert has_open_questions(brain) is True


# ============================================================================
# Agent-backed jobs
# ============================================================================


class TestAgentJobs:
    """Tests for jobs produced by build_assistant_jobs."""

    def test_unknown_agent_rejected(self):
        session = BrainSession(create_brain("goal"), run_id="run-1")
        agents = _make_agents()
        del agents[agent_ids.TASK_BREAKDOWN]

        with pytest.raises(GraphConstructionError, match="unknown agent"):
            build_assistant_jobs(session, agents)

    @pytest.mark.asyncio
    async def test_successful_job_merges_into_session(self):
        session = BrainSession(create_brain("goal"), run_id="run-1")
        breakdown = _StubAgent(
            TaskBreakdownResult(success=True, tasks=[{"id": "T1", "title": "Draft outline"}])
        )
        jobs = build_assistant_jobs(
            session, _make_agents(**{agent_ids.TASK_BREAKDOWN: breakdown})
        )
        job = next(j for j in jobs if j.id == "task-breakdown")

        await job.run()

        assert [t.id for t in session.brain.task_backlog] == ["T1"]
        assert session.brain.history[-1].agent_id == agent_ids.TASK_BREAKDOWN
        assert session.brain.history[-1].run_id == "run-1"

    @pytest.mark.asyncio
    async def test_failed_result_raises_and_is_not_merged(self):
        session = BrainSession(create_brain("goal"), run_id="run-1")
        breakdown = _StubAgent(TaskBreakdownResult(success=False, error="LLM down"))
        jobs = build_assistant_jobs(
            session, _make_agents(**{agent_ids.TASK_BREAKDOWN: breakdown})
        )
        job = next(j for j in jobs if j.id == "task-breakdown")

        with pytest.raises(AgentFailedError, match="LLM down"):
            await job.run()

        assert session.brain.history == []

    @pytest.mark.asyncio
    async def test_agent_receives_snapshot_not_live_brain(self):
        session = BrainSession(create_brain("goal"), run_id="run-1")
        breakdown = _StubAgent(TaskBreakdownResult(success=True))
        jobs = build_assistant_jobs(
            session, _make_agents(**{agent_ids.TASK_BREAKDOWN: breakdown})
        )

        await next(j for j in jobs if j.id == "task-breakdown").run()

        assert breakdown.seen[0] is not session.brain
