"""
Web researcher output contract.
"""

from typing import List, Literal, Optional

from pydantic import Field

from assistant.brain.schemas import Source
from assistant.shared.schemas.base import BaseAgentResult, CamelModel


class Fact(CamelModel):
    """A factual statement lifted from a source."""

    fact: str
    source: Optional[str] = Field(default=None, description="URL the fact came from")


class WebResearcherResult(BaseAgentResult):
    """Contract for web researcher output. Sources are upserted by URL."""

    agent_id: Literal["web-researcher"] = "web-researcher"
    sources: List[Source] = Field(default_factory=list)
    top_findings: List[str] = Field(default_factory=list)
    facts: List[Fact] = Field(default_factory=list)
    controversies: List[str] = Field(default_factory=list)
