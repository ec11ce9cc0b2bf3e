"""
Prioritizer and scheduler output contract.

Tasks are ranked with MoSCoW-style priorities (without "won't") and
placed into a today / this week schedule.
"""

from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from assistant.shared.response_parser import as_string_list
from assistant.shared.schemas.base import BaseAgentResult, CamelModel, normalize_choice


Priority = Literal["must", "should", "could"]
PRIORITIES = ("must", "should", "could")


class PrioritizedTask(CamelModel):
    """Priority and order of one backlog task."""

    task_id: str
    priority: Priority = "should"
    order: int = Field(default=0, ge=0)
    estimated_time: Optional[str] = None

    @field_validator("task_id", mode="before")
    @classmethod
    def _coerce_task_id(cls, value: Any) -> str:
        return str(value).strip() if value is not None else value

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> str:
        return normalize_choice(value, PRIORITIES, "should")


class Schedule(CamelModel):
    """Task ids due today and this week, plus free-text recommendations."""

    today: List[str] = Field(default_factory=list)
    this_week: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    @field_validator("today", "this_week", "recommendations", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return as_string_list(value)


class NextAction(CamelModel):
    """An immediately actionable step."""

    task_id: str
    description: str
    estimated_time: Optional[str] = None

    @field_validator("task_id", mode="before")
    @classmethod
    def _coerce_task_id(cls, value: Any) -> str:
        return str(value).strip() if value is not None else value


class PrioritizerSchedulerResult(BaseAgentResult):
    """Contract for prioritizer output."""

    agent_id: Literal["prioritizer-scheduler"] = "prioritizer-scheduler"
    prioritized_tasks: List[PrioritizedTask] = Field(default_factory=list)
    schedule: Schedule = Field(default_factory=Schedule)
    next_actions: List[NextAction] = Field(default_factory=list)
