"""
Enrichment pipeline schemas.

Defines the state that flows through the enrichment graph and the
request/response models of its API.
"""

import operator
from typing import Annotated, Any, Dict, List, Literal, Optional, TypedDict

from pydantic import Field

from assistant.shared.contracts import (
    ContentSummaryResult,
    TaskAnalysisResult,
    WebContentResult,
)
from assistant.shared.schemas.base import CamelModel


class EnrichmentState(TypedDict):
    """
    State schema for the enrichment graph.

    Agent outputs are stored as dicts in their handoff slots; the
    ``*_attempted`` flags stop the router from retrying a failed stage.
    """

    # Task being enriched
    task_id: str
    title: str
    description: Optional[str]
    metadata: Optional[dict]
    url: Optional[str]

    # Agent handoff slots
    web_content: Optional[dict]
    content_summary: Optional[dict]
    task_analysis: Optional[dict]

    # Routing flags
    fetch_attempted: bool
    summarize_attempted: bool
    analyze_attempted: bool

    # Tracking
    current_node: str
    errors: Annotated[List[str], operator.add]
    messages: Annotated[List[dict], operator.add]
    session_id: Optional[str]


class EnrichmentRequest(CamelModel):
    """Request to enrich a kanban task."""

    task_id: str = Field(description="Id of the task being enriched")
    title: str = Field(min_length=1, description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Task metadata; 'url' names the linked page"
    )


class EnrichmentResponse(CamelModel):
    """Result of the enrichment pipeline."""

    session_id: str
    task_id: str
    status: Literal["complete", "error"]
    url: Optional[str] = None
    web_content: Optional[WebContentResult] = None
    content_summary: Optional[ContentSummaryResult] = None
    task_analysis: Optional[TaskAnalysisResult] = None
    messages: List[Dict[str, Any]] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
