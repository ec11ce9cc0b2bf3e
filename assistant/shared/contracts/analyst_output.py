"""
Analyst agent output contract.

The analyst turns a free-text request into the structured frame of the
brain: objective, context, constraints, deliverables, open questions and
risks.
"""

from typing import List, Literal, Optional

from pydantic import Field

from assistant.brain.schemas import (
    BrainConstraints,
    BrainContext,
    Deliverable,
    OpenQuestion,
    Risk,
)
from assistant.shared.schemas.base import BaseAgentResult


class AnalystResult(BaseAgentResult):
    """Contract for analyst output."""

    agent_id: Literal["analyst"] = "analyst"
    objective: Optional[str] = Field(
        default=None, description="Refined objective; replaces the brain's when non-empty"
    )
    context: Optional[BrainContext] = None
    constraints: Optional[BrainConstraints] = None
    deliverables: List[Deliverable] = Field(default_factory=list)
    open_questions: List[OpenQuestion] = Field(default_factory=list)
    assumptions: List[str] = Field(
        default_factory=list, description="Assumptions made where the request was silent"
    )
    risks: List[Risk] = Field(default_factory=list)
