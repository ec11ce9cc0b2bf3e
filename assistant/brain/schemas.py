"""
Local brain schemas.

The local brain is the shared knowledge record of one orchestration run:
objective, constraints, task backlog, research plan, sources, decisions,
risks and the append-only history of raw agent outputs.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from assistant.shared.schemas.base import CamelModel, normalize_choice
from assistant.shared.response_parser import as_string_list


TaskType = Literal["preparation", "research", "implementation", "followup"]
TaskStatus = Literal["pending", "in_progress", "completed", "failed"]
Probability = Literal["low", "medium", "high"]

TASK_TYPES = ("preparation", "research", "implementation", "followup")
TASK_STATUSES = ("pending", "in_progress", "completed", "failed")
PROBABILITIES = ("low", "medium", "high")


class BrainContext(CamelModel):
    """Who the work is for and what surrounds it."""

    role: Optional[str] = None
    audience: Optional[str] = None
    scope: Optional[str] = None
    deadline: Optional[str] = None
    resources: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)

    @field_validator("resources", "tools", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return as_string_list(value)


class BrainConstraints(CamelModel):
    """Time, quality and must-have constraints."""

    time_budget: Optional[str] = None
    quality_level: Optional[str] = None
    must_haves: List[str] = Field(default_factory=list)

    @field_validator("must_haves", mode="before")
    @classmethod
    def _coerce_must_haves(cls, value: Any) -> List[str]:
        return as_string_list(value)


class OpenQuestion(CamelModel):
    """A question the analyst could not answer from the request."""

    question: str
    needed_input: Optional[str] = None
    options: List[str] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> List[str]:
        return as_string_list(value)


class BacklogTask(CamelModel):
    """A single step of the task backlog."""

    id: str
    title: str
    description: Optional[str] = None
    type: TaskType = "implementation"
    effort: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)
    status: TaskStatus = "pending"

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value).strip() if value is not None else value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        return normalize_choice(value, TASK_TYPES, "implementation")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return normalize_choice(value, TASK_STATUSES, "pending")

    @field_validator("dependencies", mode="before")
    @classmethod
    def _dedupe_dependencies(cls, value: Any) -> List[str]:
        # Set semantics, first occurrence order
        seen: Dict[str, None] = {}
        for dep in as_string_list(value):
            seen.setdefault(dep.strip(), None)
        return list(seen)


class ResearchPlan(CamelModel):
    """What to research and when to stop."""

    guiding_questions: List[str] = Field(default_factory=list)
    search_terms: List[str] = Field(default_factory=list)
    source_types: List[str] = Field(default_factory=list)
    quality_criteria: List[str] = Field(default_factory=list)
    stop_criteria: Optional[str] = None

    @field_validator(
        "guiding_questions", "search_terms", "source_types", "quality_criteria",
        mode="before",
    )
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return as_string_list(value)


class Source(CamelModel):
    """A researched source with its takeaways."""

    url: str
    title: Optional[str] = None
    date: Optional[str] = None
    trust_level: float = Field(default=0.5, ge=0, le=1)
    key_takeaways: List[str] = Field(default_factory=list)

    @field_validator("key_takeaways", mode="before")
    @classmethod
    def _coerce_takeaways(cls, value: Any) -> List[str]:
        return as_string_list(value)


class Decision(CamelModel):
    """A supported decision between options."""

    question: str
    options: List[str] = Field(default_factory=list)
    criteria: List[str] = Field(default_factory=list)
    recommendation: Optional[str] = None
    rationale: Optional[str] = None
    timestamp: Optional[str] = None

    @field_validator("options", "criteria", mode="before")
    @classmethod
    def _coerce_lists(cls, value: Any) -> List[str]:
        return as_string_list(value)


class Risk(CamelModel):
    """A risk with optional mitigation."""

    risk: str
    mitigation: Optional[str] = None
    probability: Optional[Probability] = None

    @field_validator("probability", mode="before")
    @classmethod
    def _normalize_probability(cls, value: Any) -> Optional[str]:
        return normalize_choice(value, PROBABILITIES, None)


class Deliverable(CamelModel):
    """An expected output of the work."""

    name: str
    format: Optional[str] = None
    description: Optional[str] = None


class HistoryEntry(CamelModel):
    """One raw agent output, in merge order. Never mutated or removed."""

    run_id: str
    agent_id: str
    output: Dict[str, Any] = Field(default_factory=dict)
    timestamp: str


class LocalBrain(CamelModel):
    """
    Shared knowledge record of one orchestration run.

    Every field is written by exactly one merge function per agent result
    (see assistant.brain.merge); ``history`` is append-only.
    """

    objective: str
    context: Optional[BrainContext] = None
    constraints: Optional[BrainConstraints] = None
    deliverables: List[Deliverable] = Field(default_factory=list)
    open_questions: List[OpenQuestion] = Field(default_factory=list)
    task_backlog: List[BacklogTask] = Field(default_factory=list)
    research_plan: Optional[ResearchPlan] = None
    sources: List[Source] = Field(default_factory=list)
    decisions: List[Decision] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    history: List[HistoryEntry] = Field(default_factory=list)

    def latest_output(
        self, agent_id: str, run_id: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Return the most recent raw output of ``agent_id`` (optionally within one run)."""
        for entry in reversed(self.history):
            if entry.agent_id != agent_id:
                continue
            if run_id is not None and entry.run_id != run_id:
                continue
            return entry.output
        return None

    def structural_fields(self) -> Dict[str, Any]:
        """Everything except history, for structural comparison."""
        return self.model_dump(exclude={"history"})


def create_brain(
    objective: str,
    context: Optional[BrainContext] = None,
    constraints: Optional[BrainConstraints] = None,
    deliverables: Optional[List[Deliverable]] = None,
) -> LocalBrain:
    """
    Create a fresh brain for a run.

    Raises:
        ValueError: If the objective is blank
    """
    if not objective or not objective.strip():
        raise ValueError("A brain requires a non-empty objective")
    return LocalBrain(
        objective=objective.strip(),
        context=context,
        constraints=constraints,
        deliverables=list(deliverables or []),
    )
