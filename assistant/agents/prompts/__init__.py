"""Prompt templates and builders for the planning agents."""

from assistant.agents.prompts.builders import (
    build_analyst_prompt,
    build_content_summarizer_prompt,
    build_decision_options_prompt,
    build_decision_prompt,
    build_final_assembler_prompt,
    build_prioritizer_prompt,
    build_research_planner_prompt,
    build_task_analyzer_prompt,
    build_task_breakdown_prompt,
)

__all__ = [
    "build_analyst_prompt",
    "build_task_breakdown_prompt",
    "build_research_planner_prompt",
    "build_prioritizer_prompt",
    "build_decision_prompt",
    "build_decision_options_prompt",
    "build_final_assembler_prompt",
    "build_content_summarizer_prompt",
    "build_task_analyzer_prompt",
]
