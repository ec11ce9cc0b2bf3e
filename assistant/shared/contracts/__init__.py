"""Agent output contracts for inter-agent handoffs."""

from typing import Annotated, Any, Optional, Union

from pydantic import Discriminator, Tag, TypeAdapter

from assistant.shared.contracts.analyst_output import AnalystResult
from assistant.shared.contracts.breakdown_output import (
    ResearchPlannerResult,
    TaskBreakdownResult,
)
from assistant.shared.contracts.research_output import Fact, WebResearcherResult
from assistant.shared.contracts.schedule_output import (
    NextAction,
    PrioritizedTask,
    PrioritizerSchedulerResult,
    Schedule,
)
from assistant.shared.contracts.decision_output import DecisionSupportResult
from assistant.shared.contracts.deliverable import (
    AssistantDeliverable,
    FinalAssemblerResult,
    Priorities,
    ResearchSummary,
    TodoItem,
)
from assistant.shared.contracts.enrichment_output import (
    ContentSummaryResult,
    TaskAnalysisResult,
    WebContentResult,
)


def _agent_id_of(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return value.get("agent_id", value.get("agentId"))
    return getattr(value, "agent_id", None)


AgentResult = Annotated[
    Union[
        Annotated[AnalystResult, Tag("analyst")],
        Annotated[TaskBreakdownResult, Tag("task-breakdown")],
        Annotated[ResearchPlannerResult, Tag("research-planner")],
        Annotated[WebResearcherResult, Tag("web-researcher")],
        Annotated[PrioritizerSchedulerResult, Tag("prioritizer-scheduler")],
        Annotated[DecisionSupportResult, Tag("decision-support")],
        Annotated[FinalAssemblerResult, Tag("final-assembler")],
    ],
    Discriminator(_agent_id_of),
]

_agent_result_adapter: TypeAdapter = TypeAdapter(AgentResult)


def parse_agent_result(data: Any):
    """Validate a raw dict (snake_case or camelCase) into the matching result model."""
    return _agent_result_adapter.validate_python(data)


__all__ = [
    "AgentResult",
    "parse_agent_result",
    "AnalystResult",
    "TaskBreakdownResult",
    "ResearchPlannerResult",
    "WebResearcherResult",
    "Fact",
    "PrioritizerSchedulerResult",
    "PrioritizedTask",
    "Schedule",
    "NextAction",
    "DecisionSupportResult",
    "FinalAssemblerResult",
    "AssistantDeliverable",
    "TodoItem",
    "Priorities",
    "ResearchSummary",
    "WebContentResult",
    "ContentSummaryResult",
    "TaskAnalysisResult",
]
