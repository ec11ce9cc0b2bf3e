"""
Task breakdown agent.

Splits the objective into concrete backlog steps of 15 to 60 minutes,
each typed and linked to the steps it depends on.
"""

import logging
from typing import List

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import build_task_breakdown_prompt
from assistant.agents.prompts.templates import TASK_BREAKDOWN_SYSTEM_PROMPT
from assistant.brain.schemas import BacklogTask, LocalBrain
from assistant.shared.contracts import TaskBreakdownResult, agent_ids
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


BREAKDOWN_CONFIDENCE = 0.85


def _parse_tasks(raw_tasks) -> List[BacklogTask]:
    tasks: List[BacklogTask] = []
    if not isinstance(raw_tasks, list):
        return tasks
    for idx, item in enumerate(raw_tasks, start=1):
        if not isinstance(item, dict):
            continue
        item = {**item, "status": "pending"}
        item.setdefault("id", f"T{idx}")
        try:
            tasks.append(BacklogTask.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping invalid task #{idx}: {e.error_count()} validation errors")
    return tasks


class TaskBreakdownAgent(PlanningAgent):
    agent_id = agent_ids.TASK_BREAKDOWN

    async def break_down(self, brain: LocalBrain) -> TaskBreakdownResult:
        """
        Break the brain's objective into backlog tasks.

        Every returned task starts as ``pending``. Unparseable output is a
        failure rather than an empty backlog, so an existing backlog is not
        wiped by a bad response.
        """
        logger.info(f"{self._log}Breaking down objective | objective_length={len(brain.objective)}")

        try:
            raw = await self.complete(
                TASK_BREAKDOWN_SYSTEM_PROMPT, build_task_breakdown_prompt(brain)
            )
            data = parse_json_object(raw)
        except ParseError as e:
            return self.error_result(ParseError(f"Unparseable task breakdown: {e}"), TaskBreakdownResult)
        except Exception as e:
            return self.error_result(e, TaskBreakdownResult)

        tasks = _parse_tasks(data.get("tasks"))
        logger.info(f"{self._log}Breakdown complete | tasks={len(tasks)}")
        return TaskBreakdownResult(
            success=True,
            confidence=BREAKDOWN_CONFIDENCE,
            tasks=tasks,
        )

    async def run(self, brain: LocalBrain) -> TaskBreakdownResult:
        return await self.break_down(brain)
