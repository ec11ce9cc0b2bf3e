"""
Base models shared by the brain, the agent contracts and the API.

Fields are snake_case in Python and camelCase on the wire; LLM responses are
requested in camelCase so they validate straight into these models.
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseAgentResult(CamelModel):
    """
    Fields common to every agent result.

    Fields:
        agent_id: Identifier of the agent that produced the result
        success: Whether the agent completed its work
        confidence: Agent's self-reported confidence in [0, 1]
        error: Failure description when success is False
    """

    agent_id: str
    success: bool
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    error: Optional[str] = None


def normalize_choice(value: Any, allowed: Iterable[str], default: Optional[str]) -> Optional[str]:
    """
    Map a loosely-typed LLM value onto one of the allowed literals.

    Matching is case-insensitive and ignores surrounding whitespace; anything
    unrecognized falls back to ``default``.
    """
    if value is None:
        return default
    candidate = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    for option in allowed:
        if candidate == option:
            return option
    return default
