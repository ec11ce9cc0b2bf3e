"""
Prioritizer and scheduler agent.

Ranks backlog tasks must/should/could, orders them around dependencies,
places them into today / this week and picks the next actions.
"""

import logging
from typing import List

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import build_prioritizer_prompt
from assistant.agents.prompts.templates import PRIORITIZER_SYSTEM_PROMPT
from assistant.brain.schemas import BacklogTask, LocalBrain
from assistant.shared.contracts import (
    NextAction,
    PrioritizedTask,
    PrioritizerSchedulerResult,
    agent_ids,
)
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


PRIORITIZER_CONFIDENCE = 0.85
FALLBACK_NEXT_ACTIONS = 3


def fallback_prioritization(tasks: List[BacklogTask]) -> PrioritizerSchedulerResult:
    """Deterministic result used when the LLM response cannot be parsed."""
    prioritized = [
        PrioritizedTask(task_id=t.id, priority="should", order=idx, estimated_time=t.effort)
        for idx, t in enumerate(tasks, start=1)
    ]
    next_actions = [
        NextAction(task_id=t.id, description=t.title, estimated_time=t.effort)
        for t in tasks[:FALLBACK_NEXT_ACTIONS]
    ]
    return PrioritizerSchedulerResult(
        success=True,
        confidence=PRIORITIZER_CONFIDENCE,
        prioritized_tasks=prioritized,
        next_actions=next_actions,
    )


def _append_missing(result: PrioritizerSchedulerResult, tasks: List[BacklogTask]) -> None:
    # Every backlog task gets a priority; forgotten ones become "could"
    known = {p.task_id for p in result.prioritized_tasks}
    order = len(result.prioritized_tasks)
    for task in tasks:
        if task.id in known:
            continue
        order += 1
        result.prioritized_tasks.append(
            PrioritizedTask(task_id=task.id, priority="could", order=order, estimated_time=task.effort)
        )


class PrioritizerSchedulerAgent(PlanningAgent):
    agent_id = agent_ids.PRIORITIZER_SCHEDULER

    async def prioritize_and_schedule(self, brain: LocalBrain) -> PrioritizerSchedulerResult:
        """Prioritize the brain's backlog. An empty backlog needs no LLM call."""
        tasks = brain.task_backlog
        logger.info(f"{self._log}Prioritizing | tasks={len(tasks)}")

        if not tasks:
            return PrioritizerSchedulerResult(success=True, confidence=1.0)

        try:
            raw = await self.complete(PRIORITIZER_SYSTEM_PROMPT, build_prioritizer_prompt(brain))
        except Exception as e:
            return self.error_result(e, PrioritizerSchedulerResult)

        try:
            data = parse_json_object(raw)
            result = self.validate_result(PrioritizerSchedulerResult, data, PRIORITIZER_CONFIDENCE)
        except (ParseError, ValidationError) as e:
            logger.warning(f"{self._log}Could not parse prioritization, using fallback: {e}")
            return fallback_prioritization(tasks)

        _append_missing(result, tasks)
        logger.info(
            f"{self._log}Prioritization complete | prioritized={len(result.prioritized_tasks)}, "
            f"today={len(result.schedule.today)}, next_actions={len(result.next_actions)}"
        )
        return result

    async def run(self, brain: LocalBrain) -> PrioritizerSchedulerResult:
        return await self.prioritize_and_schedule(brain)
