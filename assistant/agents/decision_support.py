"""
Decision support agent.

Takes the brain's first open question and recommends one of its options,
using constraints, context and researched sources.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import (
    build_decision_options_prompt,
    build_decision_prompt,
)
from assistant.agents.prompts.templates import (
    DECISION_OPTIONS_SYSTEM_PROMPT,
    DECISION_SUPPORT_SYSTEM_PROMPT,
)
from assistant.brain.schemas import Decision, LocalBrain
from assistant.shared.contracts import DecisionSupportResult, agent_ids
from assistant.shared.response_parser import ParseError, as_string_list, parse_json_object


logger = logging.getLogger(__name__)


DECISION_CONFIDENCE = 0.8
MIN_OPTIONS = 2
FALLBACK_RATIONALE = "Decision could not be parsed; defaulting to the first option"


class DecisionSupportAgent(PlanningAgent):
    agent_id = agent_ids.DECISION_SUPPORT

    async def propose_options(self, question: str, brain: LocalBrain) -> List[str]:
        """Ask the LLM for candidate options when the analyst supplied none."""
        try:
            data = await self.complete_json(
                DECISION_OPTIONS_SYSTEM_PROMPT, build_decision_options_prompt(question, brain)
            )
        except ParseError as e:
            logger.warning(f"{self._log}Could not parse proposed options: {e}")
            return []
        return as_string_list(data.get("options"))

    async def support_decision(
        self,
        question: str,
        options: List[str],
        brain: LocalBrain,
        now: Optional[datetime] = None,
    ) -> DecisionSupportResult:
        """
        Recommend one of ``options`` for ``question``.

        Fewer than two options is a failure. Unparseable output recommends
        the first option.
        """
        logger.info(f"{self._log}Supporting decision | options={len(options)}")
        timestamp = (now or datetime.now(timezone.utc)).isoformat()

        if len(options) < MIN_OPTIONS:
            return DecisionSupportResult(
                success=False,
                confidence=0.0,
                error=f"At least {MIN_OPTIONS} options are required for decision support",
            )

        try:
            raw = await self.complete(
                DECISION_SUPPORT_SYSTEM_PROMPT, build_decision_prompt(question, options, brain)
            )
        except Exception as e:
            return self.error_result(e, DecisionSupportResult)

        try:
            data = parse_json_object(raw)
            decision = Decision(
                question=question,
                options=as_string_list(data.get("options")) or options,
                criteria=data.get("criteria"),
                recommendation=data.get("recommendation") or options[0],
                rationale=data.get("rationale") or None,
                timestamp=timestamp,
            )
        except (ParseError, ValidationError) as e:
            logger.warning(f"{self._log}Could not parse decision, using first option: {e}")
            decision = Decision(
                question=question,
                options=options,
                recommendation=options[0],
                rationale=FALLBACK_RATIONALE,
                timestamp=timestamp,
            )

        logger.info(f"{self._log}Decision made | recommendation={decision.recommendation}")
        return DecisionSupportResult(
            success=True, confidence=DECISION_CONFIDENCE, decision=decision
        )

    async def run(self, brain: LocalBrain) -> DecisionSupportResult:
        if not brain.open_questions:
            return DecisionSupportResult(
                success=False, confidence=0.0, error="No open question to decide"
            )
        open_question = brain.open_questions[0]

        try:
            options = open_question.options or await self.propose_options(
                open_question.question, brain
            )
        except Exception as e:
            return self.error_result(e, DecisionSupportResult)

        return await self.support_decision(open_question.question, options, brain)
