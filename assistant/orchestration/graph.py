"""
Job graph construction.

A graph is a tuple of declarative ``JobSpec`` values. ``build_jobs`` turns
specs into runnable jobs through a job factory, so the same builder serves
the assistant graph and synthetic graphs in tests. Building never runs an
agent or touches the brain beyond evaluating conditions on a snapshot.
"""

import logging
from typing import Callable, Dict, List, Mapping, Sequence, get_args

from assistant.brain.schemas import LocalBrain
from assistant.brain.store import BrainSession
from assistant.orchestration.errors import AgentFailedError, GraphConstructionError
from assistant.orchestration.schemas import Job, JobSpec, ProcessingStage
from assistant.shared.contracts import agent_ids


logger = logging.getLogger(__name__)


JobFactory = Callable[[JobSpec], Callable[[], object]]

_STAGES = frozenset(get_args(ProcessingStage))


def has_open_questions(brain: LocalBrain) -> bool:
    return len(brain.open_questions) > 0


ASSISTANT_GRAPH = (
    JobSpec(
        id="task-breakdown",
        agent_id=agent_ids.TASK_BREAKDOWN,
        stage="task-breakdown",
        message="Breaking down tasks...",
    ),
    JobSpec(
        id="research-planning",
        agent_id=agent_ids.RESEARCH_PLANNER,
        stage="research-planning",
        message="Planning research...",
    ),
    JobSpec(
        id="web-research",
        agent_id=agent_ids.WEB_RESEARCHER,
        dependencies=("research-planning",),
        stage="web-research",
        message="Performing web research...",
    ),
    JobSpec(
        id="prioritization",
        agent_id=agent_ids.PRIORITIZER_SCHEDULER,
        dependencies=("task-breakdown",),
        stage="prioritization",
        message="Prioritizing and scheduling tasks...",
    ),
    JobSpec(
        id="decision-support",
        agent_id=agent_ids.DECISION_SUPPORT,
        dependencies=("web-research",),
        stage="decision-support",
        message="Supporting decision...",
        condition=has_open_questions,
    ),
)


def build_jobs(
    specs: Sequence[JobSpec],
    snapshot: LocalBrain,
    job_factory: JobFactory,
) -> List[Job]:
    """
    Turn specs into jobs, dropping conditional specs whose condition fails.

    Raises:
        GraphConstructionError: On duplicate job ids, dependencies on ids
            absent from the built set, or an unknown progress stage
    """
    selected = [s for s in specs if s.condition is None or s.condition(snapshot)]

    seen: Dict[str, JobSpec] = {}
    for spec in selected:
        if spec.id in seen:
            raise GraphConstructionError(f"Duplicate job id '{spec.id}'")
        if spec.stage is not None and spec.stage not in _STAGES:
            raise GraphConstructionError(
                f"Job '{spec.id}' reports unknown stage '{spec.stage}'"
            )
        seen[spec.id] = spec

    for spec in selected:
        for dep in spec.dependencies:
            if dep not in seen:
                raise GraphConstructionError(
                    f"Job '{spec.id}' depends on unknown job '{dep}'"
                )

    omitted = [s.id for s in specs if s.id not in seen]
    logger.info(
        f"[graph=assistant] Built job graph | jobs={list(seen)}, omitted={omitted}"
    )

    return [
        Job(
            id=spec.id,
            agent_id=spec.agent_id,
            dependencies=frozenset(spec.dependencies),
            run=job_factory(spec),
        )
        for spec in selected
    ]


def agent_job_factory(session: BrainSession, agents: Mapping[str, object]) -> JobFactory:
    """
    Job factory binding specs to agents and a brain session.

    Each job reads the latest snapshot when it starts, runs its agent and
    merges a successful result; an unsuccessful result raises
    ``AgentFailedError`` and is not merged.
    """

    def factory(spec: JobSpec):
        agent = agents.get(spec.agent_id)
        if agent is None:
            raise GraphConstructionError(
                f"Job '{spec.id}' references unknown agent '{spec.agent_id}'"
            )

        async def run():
            snapshot = session.snapshot()
            result = await agent.run(snapshot)
            if not result.success:
                raise AgentFailedError(spec.agent_id, result.error or "agent reported failure")
            await session.apply(result)
            return result

        return run

    return factory


def build_assistant_jobs(
    session: BrainSession,
    agents: Mapping[str, object],
    specs: Sequence[JobSpec] = ASSISTANT_GRAPH,
) -> List[Job]:
    """Build the assistant job graph for one run."""
    return build_jobs(specs, session.snapshot(), agent_job_factory(session, agents))
