"""
Field-scoped merge operations for the local brain.

Exactly one merge function exists per agent. Each one is pure: it returns a
new brain and never mutates its input. Each appends one history entry with
the raw agent output, and merging the same result twice leaves every
structural field unchanged the second time.

Field ownership:
    analyst               -> objective, context, constraints, deliverables,
                             open_questions (union), risks (union)
    task-breakdown        -> task_backlog (replaced)
    research-planner      -> research_plan (replaced)
    web-researcher        -> sources (upsert by URL)
    prioritizer-scheduler -> task_backlog effort fill-in only
    decision-support      -> decisions (upsert by question)
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from assistant.brain.schemas import BacklogTask, HistoryEntry, LocalBrain
from assistant.shared.contracts import (
    AnalystResult,
    DecisionSupportResult,
    PrioritizerSchedulerResult,
    ResearchPlannerResult,
    TaskBreakdownResult,
    WebResearcherResult,
)
from assistant.shared.contracts import agent_ids
from assistant.shared.schemas.base import BaseAgentResult


logger = logging.getLogger(__name__)


def _timestamp(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def _append_history(
    brain: LocalBrain, result: BaseAgentResult, run_id: str, now: Optional[datetime]
) -> None:
    brain.history.append(
        HistoryEntry(
            run_id=run_id,
            agent_id=result.agent_id,
            output=result.model_dump(mode="json", by_alias=True),
            timestamp=_timestamp(now),
        )
    )


def merge_analyst_result(
    brain: LocalBrain,
    result: AnalystResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Merge analyst output: replace the frame, union questions and risks."""
    merged = brain.model_copy(deep=True)

    if result.success:
        if result.objective and result.objective.strip():
            merged.objective = result.objective.strip()
        if result.context is not None:
            merged.context = result.context.model_copy(deep=True)
        if result.constraints is not None:
            merged.constraints = result.constraints.model_copy(deep=True)
        if result.deliverables:
            merged.deliverables = [d.model_copy(deep=True) for d in result.deliverables]

        known_questions = {q.question for q in merged.open_questions}
        for question in result.open_questions:
            if question.question not in known_questions:
                merged.open_questions.append(question.model_copy(deep=True))
                known_questions.add(question.question)

        known_risks = {r.risk for r in merged.risks}
        for risk in result.risks:
            if risk.risk not in known_risks:
                merged.risks.append(risk.model_copy(deep=True))
                known_risks.add(risk.risk)

    _append_history(merged, result, run_id, now)
    return merged


def merge_task_breakdown_result(
    brain: LocalBrain,
    result: TaskBreakdownResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Replace the backlog wholesale. Duplicate task ids collapse, first wins."""
    merged = brain.model_copy(deep=True)

    if result.success:
        backlog: List[BacklogTask] = []
        seen_ids = set()
        for task in result.tasks:
            if task.id in seen_ids:
                logger.warning(f"Dropping duplicate task id '{task.id}' from breakdown")
                continue
            seen_ids.add(task.id)
            backlog.append(task.model_copy(deep=True))
        merged.task_backlog = backlog

    _append_history(merged, result, run_id, now)
    return merged


def merge_research_planner_result(
    brain: LocalBrain,
    result: ResearchPlannerResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Replace the research plan wholesale."""
    merged = brain.model_copy(deep=True)

    if result.success and result.research_plan is not None:
        merged.research_plan = result.research_plan.model_copy(deep=True)

    _append_history(merged, result, run_id, now)
    return merged


def merge_web_researcher_result(
    brain: LocalBrain,
    result: WebResearcherResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Upsert sources keyed by URL."""
    merged = brain.model_copy(deep=True)

    if result.success:
        index_by_url: Dict[str, int] = {s.url: i for i, s in enumerate(merged.sources)}
        for source in result.sources:
            if source.url in index_by_url:
                merged.sources[index_by_url[source.url]] = source.model_copy(deep=True)
            else:
                index_by_url[source.url] = len(merged.sources)
                merged.sources.append(source.model_copy(deep=True))

    _append_history(merged, result, run_id, now)
    return merged


def merge_prioritizer_result(
    brain: LocalBrain,
    result: PrioritizerSchedulerResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Fill missing task effort from estimated times. Priorities live in history."""
    merged = brain.model_copy(deep=True)

    if result.success:
        estimates = {
            p.task_id: p.estimated_time
            for p in result.prioritized_tasks
            if p.estimated_time
        }
        for task in merged.task_backlog:
            if not task.effort and task.id in estimates:
                task.effort = estimates[task.id]

    _append_history(merged, result, run_id, now)
    return merged


def merge_decision_support_result(
    brain: LocalBrain,
    result: DecisionSupportResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """Upsert the decision keyed by question text."""
    merged = brain.model_copy(deep=True)

    if result.success and result.decision is not None:
        decision = result.decision.model_copy(deep=True)
        for i, existing in enumerate(merged.decisions):
            if existing.question == decision.question:
                merged.decisions[i] = decision
                break
        else:
            merged.decisions.append(decision)

    _append_history(merged, result, run_id, now)
    return merged


MERGE_FUNCTIONS: Dict[str, Callable[..., LocalBrain]] = {
    agent_ids.ANALYST: merge_analyst_result,
    agent_ids.TASK_BREAKDOWN: merge_task_breakdown_result,
    agent_ids.RESEARCH_PLANNER: merge_research_planner_result,
    agent_ids.WEB_RESEARCHER: merge_web_researcher_result,
    agent_ids.PRIORITIZER_SCHEDULER: merge_prioritizer_result,
    agent_ids.DECISION_SUPPORT: merge_decision_support_result,
}


def merge_result(
    brain: LocalBrain,
    result: BaseAgentResult,
    run_id: str,
    now: Optional[datetime] = None,
) -> LocalBrain:
    """
    Dispatch an agent result to its merge function.

    Raises:
        ValueError: If no merge is defined for the result's agent
    """
    merge_fn = MERGE_FUNCTIONS.get(result.agent_id)
    if merge_fn is None:
        raise ValueError(f"No merge defined for agent '{result.agent_id}'")
    return merge_fn(brain, result, run_id, now)
