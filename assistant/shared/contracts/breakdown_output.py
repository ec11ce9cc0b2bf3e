"""
Task breakdown and research planner output contracts.

Both agents run in the first wave and write disjoint brain fields:
the task backlog and the research plan.
"""

from typing import List, Literal, Optional

from pydantic import Field

from assistant.brain.schemas import BacklogTask, ResearchPlan
from assistant.shared.schemas.base import BaseAgentResult


class TaskBreakdownResult(BaseAgentResult):
    """Contract for task breakdown output. ``tasks`` replaces the backlog."""

    agent_id: Literal["task-breakdown"] = "task-breakdown"
    tasks: List[BacklogTask] = Field(
        default_factory=list, description="Concrete backlog steps with dependencies"
    )


class ResearchPlannerResult(BaseAgentResult):
    """Contract for research planner output."""

    agent_id: Literal["research-planner"] = "research-planner"
    research_plan: Optional[ResearchPlan] = Field(
        default=None, description="Replaces the brain's research plan when present"
    )
