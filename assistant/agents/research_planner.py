"""
Research planner agent.

Decides what to research for the objective: guiding questions, search
terms, source types, quality criteria and a stop criterion.
"""

import logging

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import build_research_planner_prompt
from assistant.agents.prompts.templates import RESEARCH_PLANNER_SYSTEM_PROMPT
from assistant.brain.schemas import LocalBrain
from assistant.shared.contracts import ResearchPlannerResult, agent_ids
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


PLANNER_CONFIDENCE = 0.8
DEFAULT_STOP_CRITERIA = "Stop once enough relevant information has been found"


class ResearchPlannerAgent(PlanningAgent):
    agent_id = agent_ids.RESEARCH_PLANNER

    async def plan_research(self, brain: LocalBrain) -> ResearchPlannerResult:
        """Produce a research plan for the brain's objective."""
        logger.info(f"{self._log}Planning research | objective_length={len(brain.objective)}")

        try:
            raw = await self.complete(
                RESEARCH_PLANNER_SYSTEM_PROMPT, build_research_planner_prompt(brain)
            )
            data = parse_json_object(raw)
            # Accept the plan either nested or at the top level
            plan = data.get("researchPlan", data.get("research_plan", data))
            result = self.validate_result(
                ResearchPlannerResult, {"researchPlan": plan}, PLANNER_CONFIDENCE
            )
        except (ParseError, ValidationError) as e:
            return self.error_result(ParseError(f"Unparseable research plan: {e}"), ResearchPlannerResult)
        except Exception as e:
            return self.error_result(e, ResearchPlannerResult)

        plan = result.research_plan
        if plan is not None and not plan.stop_criteria:
            plan.stop_criteria = DEFAULT_STOP_CRITERIA
        logger.info(
            f"{self._log}Research plan ready | "
            f"questions={len(plan.guiding_questions) if plan else 0}, "
            f"search_terms={len(plan.search_terms) if plan else 0}"
        )
        return result

    async def run(self, brain: LocalBrain) -> ResearchPlannerResult:
        return await self.plan_research(brain)
