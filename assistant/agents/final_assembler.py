"""
Final assembler agent.

Runs after the job graph. Reduces the brain plus the prioritizer and web
researcher outputs of the current run (read from history) into the
deliverable returned to the caller.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from assistant.agents.base import PlanningAgent
from assistant.agents.prompts.builders import build_final_assembler_prompt
from assistant.agents.prompts.templates import FINAL_ASSEMBLER_SYSTEM_PROMPT
from assistant.brain.schemas import LocalBrain
from assistant.shared.contracts import (
    AssistantDeliverable,
    FinalAssemblerResult,
    Priorities,
    PrioritizerSchedulerResult,
    ResearchSummary,
    TodoItem,
    WebResearcherResult,
    agent_ids,
)
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


ASSEMBLER_CONFIDENCE = 0.9
DEFAULT_MAX_NEXT_ACTIONS = 3


def _load_output(model_cls, output: Optional[Dict[str, Any]], agent_id: str):
    if not output:
        return model_cls(success=True)
    try:
        return model_cls.model_validate(output)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed {agent_id} output in history: {e.error_count()} errors")
        return model_cls(success=True)


def _priorities_from(prioritizer: PrioritizerSchedulerResult) -> Priorities:
    grouped: Dict[str, List[str]] = {"must": [], "should": [], "could": []}
    for p in sorted(prioritizer.prioritized_tasks, key=lambda p: p.order):
        grouped[p.priority].append(p.task_id)
    return Priorities(**grouped)


def annotate_todo_list(deliverable: AssistantDeliverable) -> AssistantDeliverable:
    """Fill each to-do's priority and schedule bucket from the grouped views."""
    priority_of = {}
    for level in ("must", "should", "could"):
        for task_id in getattr(deliverable.priorities, level):
            priority_of.setdefault(task_id, level)
    today = set(deliverable.schedule.today)
    this_week = set(deliverable.schedule.this_week)

    for item in deliverable.todo_list:
        if item.priority is None:
            item.priority = priority_of.get(item.id)
        if item.id in today:
            item.schedule_bucket = "today"
        elif item.id in this_week:
            item.schedule_bucket = "this_week"
        else:
            item.schedule_bucket = "later"
    return deliverable


def build_fallback_deliverable(
    brain: LocalBrain,
    prioritizer: PrioritizerSchedulerResult,
    web_research: WebResearcherResult,
    max_next_actions: int = DEFAULT_MAX_NEXT_ACTIONS,
) -> AssistantDeliverable:
    """Deterministic deliverable built from the brain and upstream outputs only."""
    priorities = _priorities_from(prioritizer)
    estimates = {p.task_id: p.estimated_time for p in prioritizer.prioritized_tasks}
    priority_of = {p.task_id: p.priority for p in prioritizer.prioritized_tasks}

    todo_list = [
        TodoItem(
            id=task.id,
            title=task.title,
            description=task.description,
            dependencies=task.dependencies,
            priority=priority_of.get(task.id, "should"),
            estimated_time=task.effort or estimates.get(task.id),
        )
        for task in brain.task_backlog
    ]

    deliverable = AssistantDeliverable(
        objective=brain.objective,
        todo_list=todo_list,
        priorities=priorities,
        schedule=prioritizer.schedule.model_copy(deep=True),
        research_summary=ResearchSummary(
            key_findings=list(web_research.top_findings),
            sources=[s.model_copy(deep=True) for s in brain.sources],
        ),
        risks=[r.model_copy(deep=True) for r in brain.risks],
        next_actions=list(prioritizer.next_actions[:max_next_actions]),
    )
    return annotate_todo_list(deliverable)


def _merge_parsed(
    data: Dict[str, Any],
    fallback: AssistantDeliverable,
    max_next_actions: int,
) -> AssistantDeliverable:
    # Keys the LLM left out come from the deterministic deliverable
    defaults = fallback.model_dump(by_alias=True)
    payload = {key: value for key, value in data.items() if value not in (None, "", [], {})}
    deliverable = AssistantDeliverable.model_validate({**defaults, **payload})
    deliverable.next_actions = deliverable.next_actions[:max_next_actions]
    return annotate_todo_list(deliverable)


class FinalAssemblerAgent(PlanningAgent):
    agent_id = agent_ids.FINAL_ASSEMBLER

    def __init__(self, *args, max_next_actions: int = DEFAULT_MAX_NEXT_ACTIONS, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_next_actions = max_next_actions

    async def assemble(
        self, brain: LocalBrain, run_id: Optional[str] = None
    ) -> FinalAssemblerResult:
        """
        Assemble the deliverable for ``run_id`` (latest outputs when None).

        Unparseable LLM output still succeeds with the deterministic
        deliverable; an LLM call failure is an assembly failure.
        """
        prioritizer = _load_output(
            PrioritizerSchedulerResult,
            brain.latest_output(agent_ids.PRIORITIZER_SCHEDULER, run_id),
            agent_ids.PRIORITIZER_SCHEDULER,
        )
        web_research = _load_output(
            WebResearcherResult,
            brain.latest_output(agent_ids.WEB_RESEARCHER, run_id),
            agent_ids.WEB_RESEARCHER,
        )
        logger.info(
            f"{self._log}Assembling | tasks={len(brain.task_backlog)}, "
            f"prioritized={len(prioritizer.prioritized_tasks)}, sources={len(brain.sources)}"
        )

        fallback = build_fallback_deliverable(
            brain, prioritizer, web_research, self.max_next_actions
        )

        try:
            raw = await self.complete(
                FINAL_ASSEMBLER_SYSTEM_PROMPT.format(max_next_actions=self.max_next_actions),
                build_final_assembler_prompt(
                    brain,
                    prioritizer.model_dump(by_alias=True),
                    web_research.model_dump(by_alias=True),
                ),
            )
        except Exception as e:
            return self.error_result(e, FinalAssemblerResult)

        try:
            deliverable = _merge_parsed(parse_json_object(raw), fallback, self.max_next_actions)
        except (ParseError, ValidationError) as e:
            logger.warning(f"{self._log}Could not parse assembly, using fallback deliverable: {e}")
            deliverable = fallback

        logger.info(
            f"{self._log}Assembly complete | todos={len(deliverable.todo_list)}, "
            f"next_actions={len(deliverable.next_actions)}"
        )
        return FinalAssemblerResult(
            success=True, confidence=ASSEMBLER_CONFIDENCE, result=deliverable
        )

    async def run(self, brain: LocalBrain) -> FinalAssemblerResult:
        return await self.assemble(brain)
