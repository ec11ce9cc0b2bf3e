"""
Analyst agent.

Clarifies objective, scope, audience, deadline, deliverables, open
questions and risks from the raw request. Runs before the job graph is
built, since the graph depends on whether open questions exist.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import build_analyst_prompt
from assistant.agents.prompts.templates import ANALYST_SYSTEM_PROMPT
from assistant.brain.schemas import (
    BrainConstraints,
    BrainContext,
    Deliverable,
    LocalBrain,
)
from assistant.shared.contracts import AnalystResult, agent_ids
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


ANALYST_CONFIDENCE = 0.8
FALLBACK_CONFIDENCE = 0.3


class AnalystAgent(PlanningAgent):
    agent_id = agent_ids.ANALYST

    async def analyze(
        self,
        task: str,
        context: Optional[BrainContext] = None,
        constraints: Optional[BrainConstraints] = None,
        deliverables: Optional[List[Deliverable]] = None,
    ) -> AnalystResult:
        """
        Analyze a task description.

        Unparseable LLM output still succeeds with a minimal result echoing
        the request; an LLM call failure yields ``success=False``.
        """
        logger.info(f"{self._log}Analyzing task | task_length={len(task)}")

        try:
            prompt = build_analyst_prompt(task, context, constraints, deliverables)
            raw = await self.complete(ANALYST_SYSTEM_PROMPT, prompt)
        except Exception as e:
            return self.error_result(e, AnalystResult)

        try:
            data = parse_json_object(raw)
            result = self.validate_result(AnalystResult, data, ANALYST_CONFIDENCE)
        except (ParseError, ValidationError) as e:
            logger.warning(f"{self._log}Could not parse analysis, using request as-is: {e}")
            return AnalystResult(
                success=True,
                confidence=FALLBACK_CONFIDENCE,
                objective=task,
                context=context,
                constraints=constraints,
                deliverables=list(deliverables or []),
            )

        logger.info(
            f"{self._log}Analysis complete | open_questions={len(result.open_questions)}, "
            f"risks={len(result.risks)}, deliverables={len(result.deliverables)}"
        )
        return result

    async def run(self, brain: LocalBrain) -> AnalystResult:
        return await self.analyze(
            brain.objective, brain.context, brain.constraints, brain.deliverables
        )
