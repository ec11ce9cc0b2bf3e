"""
Orchestration schemas.

Job and scheduler types, progress events, and the request/response
models exchanged with callers.
"""

import enum
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    List,
    Literal,
    Optional,
    Tuple,
)

from pydantic import ConfigDict, Field, field_validator

from assistant.brain.schemas import (
    BrainConstraints,
    BrainContext,
    Deliverable,
    LocalBrain,
)
from assistant.shared.contracts import (
    AnalystResult,
    AssistantDeliverable,
    FinalAssemblerResult,
)
from assistant.shared.schemas.base import CamelModel


# ============================================================================
# Jobs and scheduling
# ============================================================================


class FailurePolicy(str, enum.Enum):
    """How dependents of a failed job are treated."""

    # Failed jobs count as resolved; dependents run without their contribution
    RESOLVE = "resolve"
    # Dependents of a failed or skipped job are skipped
    SKIP_DEPENDENTS = "skip_dependents"


@dataclass(frozen=True)
class Job:
    """
    A runnable unit of the job graph.

    Attributes:
        id: Unique id within one run
        agent_id: Agent the job invokes
        dependencies: Ids of jobs that must finish first
        run: Coroutine factory; reads a brain snapshot, invokes the agent
            and merges the result, raising on failure
    """

    id: str
    agent_id: str
    dependencies: FrozenSet[str]
    run: Callable[[], Awaitable[Any]] = field(compare=False, repr=False)


@dataclass(frozen=True)
class JobSpec:
    """
    Declarative description of one job of a graph.

    Attributes:
        id: Job id
        agent_id: Agent the job invokes
        dependencies: Job ids this job waits for
        stage: Progress stage reported when the job starts
        message: Progress message reported when the job starts
        condition: Evaluated once against the brain snapshot at build time;
            the job is omitted when it returns False
    """

    id: str
    agent_id: str
    dependencies: Tuple[str, ...] = ()
    stage: Optional[str] = None
    message: Optional[str] = None
    condition: Optional[Callable[[LocalBrain], bool]] = field(
        default=None, compare=False, repr=False
    )


@dataclass
class SchedulerOutcome:
    """What happened while executing a job graph."""

    waves: List[List[str]] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    deadlocked: List[str] = field(default_factory=list)
    started_at: Dict[str, float] = field(default_factory=dict)
    finished_at: Dict[str, float] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def completed(self) -> List[str]:
        return self.succeeded + self.failed + self.skipped


# ============================================================================
# Progress
# ============================================================================


ProcessingStage = Literal[
    "analysis",
    "local-brain-prep",
    "task-breakdown",
    "research-planning",
    "web-research",
    "prioritization",
    "decision-support",
    "final-assembly",
    "completed",
    "error",
]


class ProgressEvent(CamelModel):
    """An immutable progress notification."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    stage: ProcessingStage
    progress: int = Field(ge=0, le=100)
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: str


# ============================================================================
# Request / Response
# ============================================================================


class AssistantRequest(CamelModel):
    """A planning request from a caller."""

    request_id: str = Field(description="Caller-supplied id; responses are keyed by it")
    task: str = Field(description="Main task or objective in free text")
    project_id: Optional[str] = Field(
        default=None, description="When set, the project's brain is loaded and saved back"
    )
    context: Optional[BrainContext] = None
    constraints: Optional[BrainConstraints] = None
    deliverables: List[Deliverable] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("task")
    @classmethod
    def _task_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("task must not be empty")
        return value.strip()


class AssistantResponse(CamelModel):
    """Delivered exactly once per request."""

    request_id: str
    success: bool
    result: Optional[AssistantDeliverable] = None
    error: Optional[str] = None
    processing_time_ms: int = Field(ge=0)
    errors: Optional[List[str]] = None
    progress: Optional[List[ProgressEvent]] = None


class AssistantProcessingResult(CamelModel):
    """Everything a run produced, including the final brain."""

    request_id: str
    local_brain: LocalBrain
    analyst: Optional[AnalystResult] = None
    agent_outputs: Dict[str, Dict[str, Any]] = Field(
        default_factory=dict,
        description="Latest raw output of each agent in this run, keyed by agent id",
    )
    final_assembler: Optional[FinalAssemblerResult] = None
    scheduler: Optional[Dict[str, Any]] = Field(
        default=None, description="Waves and job outcomes of the run"
    )
    processing_time_ms: int = Field(ge=0)
    errors: List[str] = Field(default_factory=list)
    progress: List[ProgressEvent] = Field(default_factory=list)

    def to_response(self) -> AssistantResponse:
        """Reduce to the response delivered to the caller."""
        success = bool(self.final_assembler and self.final_assembler.success)
        return AssistantResponse(
            request_id=self.request_id,
            success=success,
            result=self.final_assembler.result if success else None,
            error="; ".join(self.errors) if self.errors else None,
            processing_time_ms=self.processing_time_ms,
            errors=list(self.errors) if self.errors else None,
            progress=list(self.progress),
        )
