"""
Final assembler output contract.

The deliverable is what the caller receives: a flattened, annotated to-do
list plus priorities, schedule, research summary, risks and next actions.
Every collection defaults to empty.
"""

from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from assistant.brain.schemas import Risk, Source
from assistant.shared.contracts.schedule_output import (
    PRIORITIES,
    NextAction,
    Priority,
    Schedule,
)
from assistant.shared.response_parser import as_string_list
from assistant.shared.schemas.base import BaseAgentResult, CamelModel, normalize_choice


ScheduleBucket = Literal["today", "this_week", "later"]
SCHEDULE_BUCKETS = ("today", "this_week", "later")


class TodoItem(CamelModel):
    """One entry of the flattened to-do list."""

    id: str
    title: str
    description: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    priority: Optional[Priority] = None
    estimated_time: Optional[str] = None
    schedule_bucket: ScheduleBucket = "later"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value).strip() if value is not None else value

    @field_validator("dependencies", mode="before")
    @classmethod
    def _coerce_dependencies(cls, value: Any) -> List[str]:
        return as_string_list(value)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Optional[str]:
        return normalize_choice(value, PRIORITIES, None)

    @field_validator("schedule_bucket", mode="before")
    @classmethod
    def _normalize_bucket(cls, value: Any) -> str:
        return normalize_choice(value, SCHEDULE_BUCKETS, "later")


class Priorities(CamelModel):
    """Task ids grouped by priority."""

    must: List[str] = Field(default_factory=list)
    should: List[str] = Field(default_factory=list)
    could: List[str] = Field(default_factory=list)

    @field_validator("must", "should", "could", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return as_string_list(value)


class ResearchSummary(CamelModel):
    """Key findings and the sources behind them."""

    key_findings: List[str] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)

    @field_validator("key_findings", mode="before")
    @classmethod
    def _coerce_findings(cls, value: Any) -> List[str]:
        return as_string_list(value)


class AssistantDeliverable(CamelModel):
    """The assembled answer to an assistant request."""

    objective: str
    success_criteria: List[str] = Field(default_factory=list)
    todo_list: List[TodoItem] = Field(default_factory=list)
    priorities: Priorities = Field(default_factory=Priorities)
    schedule: Schedule = Field(default_factory=Schedule)
    research_summary: ResearchSummary = Field(default_factory=ResearchSummary)
    risks: List[Risk] = Field(default_factory=list)
    next_actions: List[NextAction] = Field(default_factory=list)

    @field_validator("success_criteria", mode="before")
    @classmethod
    def _coerce_criteria(cls, value: Any) -> List[str]:
        return as_string_list(value)


class FinalAssemblerResult(BaseAgentResult):
    """Contract for final assembler output."""

    agent_id: Literal["final-assembler"] = "final-assembler"
    result: Optional[AssistantDeliverable] = None
