"""
Task enrichment output contracts.

Produced by the enrichment pipeline: fetch linked web content, summarize
it, then analyze the task for context, tags, priority and duration.
"""

from typing import Any, List, Literal, Optional

from pydantic import Field, field_validator

from assistant.shared.response_parser import as_string_list
from assistant.shared.schemas.base import BaseAgentResult, normalize_choice


TaskPriority = Literal["low", "medium", "high"]


class WebContentResult(BaseAgentResult):
    """Contract for a single fetched web page."""

    agent_id: Literal["web-content"] = "web-content"
    url: str
    title: Optional[str] = None
    text_content: Optional[str] = Field(
        default=None, description="Visible page text with scripts and styles removed"
    )
    content_type: Optional[str] = None
    status_code: Optional[int] = None
    fetched_at: Optional[str] = None


class ContentSummaryResult(BaseAgentResult):
    """Contract for content summarizer output."""

    agent_id: Literal["content-summarizer"] = "content-summarizer"
    summary: Optional[str] = None
    key_points: List[str] = Field(default_factory=list)
    word_count: int = Field(default=0, ge=0)

    @field_validator("key_points", mode="before")
    @classmethod
    def _coerce_points(cls, value: Any) -> List[str]:
        return as_string_list(value)


class TaskAnalysisResult(BaseAgentResult):
    """Contract for task analyzer output."""

    agent_id: Literal["task-analyzer"] = "task-analyzer"
    context: Optional[str] = Field(
        default=None, description="Short description of where the task belongs"
    )
    tags: List[str] = Field(default_factory=list)
    priority: Optional[TaskPriority] = None
    estimated_duration: Optional[str] = None
    suggested_title: Optional[str] = None
    suggested_description: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> List[str]:
        tags: List[str] = []
        for tag in as_string_list(value):
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value: Any) -> Optional[str]:
        return normalize_choice(value, ("low", "medium", "high"), None)
