"""
Prompt builders for the planning agents.

These functions construct the user prompts sent to the LLM from the
request and the current brain snapshot.
"""

import json
from typing import Any, Dict, List, Optional

from assistant.agents.prompts.templates import (
    ANALYST_RESPONSE_FORMAT,
    CONTENT_SUMMARIZER_RESPONSE_FORMAT,
    DECISION_OPTIONS_RESPONSE_FORMAT,
    DECISION_SUPPORT_RESPONSE_FORMAT,
    FINAL_ASSEMBLER_RESPONSE_FORMAT,
    JSON_ONLY_INSTRUCTION,
    NOT_SPECIFIED,
    PRIORITIZER_RESPONSE_FORMAT,
    RESEARCH_PLANNER_RESPONSE_FORMAT,
    TASK_ANALYZER_RESPONSE_FORMAT,
    TASK_BREAKDOWN_RESPONSE_FORMAT,
)
from assistant.brain.schemas import (
    BacklogTask,
    BrainConstraints,
    BrainContext,
    Deliverable,
    LocalBrain,
    Source,
)


def _join(values: Optional[List[str]], empty: str = NOT_SPECIFIED) -> str:
    return ", ".join(values) if values else empty


def _response_format(format_block: str) -> str:
    return f"Respond with JSON in this format:\n{format_block}\n\n{JSON_ONLY_INSTRUCTION}"


def format_context(context: Optional[BrainContext]) -> str:
    """Format the context section, or an empty string when there is none."""
    if context is None:
        return ""
    return (
        "Context:\n"
        f"- Role: {context.role or NOT_SPECIFIED}\n"
        f"- Audience: {context.audience or NOT_SPECIFIED}\n"
        f"- Scope: {context.scope or NOT_SPECIFIED}\n"
        f"- Deadline: {context.deadline or NOT_SPECIFIED}\n"
        f"- Resources: {_join(context.resources)}\n"
        f"- Tools: {_join(context.tools)}\n\n"
    )


def format_constraints(constraints: Optional[BrainConstraints]) -> str:
    """Format the constraints section, or an empty string when there are none."""
    if constraints is None:
        return ""
    return (
        "Constraints:\n"
        f"- Time budget: {constraints.time_budget or NOT_SPECIFIED}\n"
        f"- Quality level: {constraints.quality_level or NOT_SPECIFIED}\n"
        f"- Must-haves: {_join(constraints.must_haves, 'None')}\n\n"
    )


def format_deliverables(deliverables: List[Deliverable]) -> str:
    if not deliverables:
        return ""
    lines = []
    for d in deliverables:
        line = f"- {d.name}"
        if d.format:
            line += f" (format: {d.format})"
        if d.description:
            line += f": {d.description}"
        lines.append(line)
    return "Expected deliverables:\n" + "\n".join(lines) + "\n\n"


def format_tasks(tasks: List[BacklogTask]) -> str:
    lines = []
    for idx, task in enumerate(tasks, start=1):
        lines.append(
            f"{idx}. [{task.id}] {task.title}\n"
            f"   - Type: {task.type}\n"
            f"   - Description: {task.description or 'None'}\n"
            f"   - Estimated time: {task.effort or 'Not estimated'}\n"
            f"   - Dependencies: {_join(task.dependencies, 'None')}"
        )
    return "\n\n".join(lines)


def format_sources(sources: List[Source], max_takeaways: int = 3) -> str:
    lines = []
    for idx, source in enumerate(sources, start=1):
        takeaways = "; ".join(source.key_takeaways[:max_takeaways])
        lines.append(f"{idx}. {source.title or source.url}\n   {takeaways}")
    return "\n\n".join(lines)


def build_analyst_prompt(
    task: str,
    context: Optional[BrainContext] = None,
    constraints: Optional[BrainConstraints] = None,
    deliverables: Optional[List[Deliverable]] = None,
) -> str:
    """Build the analyst prompt from the raw request."""
    prompt = f"Task: {task}\n\n"
    prompt += format_context(context)
    prompt += format_constraints(constraints)
    prompt += format_deliverables(deliverables or [])
    prompt += _response_format(ANALYST_RESPONSE_FORMAT)
    return prompt


def build_task_breakdown_prompt(brain: LocalBrain) -> str:
    prompt = f"Objective: {brain.objective}\n\n"
    if brain.constraints and brain.constraints.time_budget:
        prompt += f"Time budget: {brain.constraints.time_budget}\n"
    if brain.context and brain.context.deadline:
        prompt += f"Deadline: {brain.context.deadline}\n"
    prompt += "\nSteps should build on each other logically.\n\n"
    prompt += _response_format(TASK_BREAKDOWN_RESPONSE_FORMAT)
    return prompt


def build_research_planner_prompt(brain: LocalBrain) -> str:
    prompt = f"Objective: {brain.objective}\n\n"
    prompt += format_context(brain.context)
    prompt += format_deliverables(brain.deliverables)
    prompt += _response_format(RESEARCH_PLANNER_RESPONSE_FORMAT)
    return prompt


def build_prioritizer_prompt(brain: LocalBrain) -> str:
    prompt = f"Tasks:\n{format_tasks(brain.task_backlog)}\n\n"
    if brain.constraints and brain.constraints.time_budget:
        prompt += f"Available time budget: {brain.constraints.time_budget}\n"
    if brain.context and brain.context.deadline:
        prompt += f"Deadline: {brain.context.deadline}\n"
    prompt += "\n" + _response_format(PRIORITIZER_RESPONSE_FORMAT)
    return prompt


def build_decision_prompt(question: str, options: List[str], brain: LocalBrain) -> str:
    numbered = "\n".join(f"{idx}. {opt}" for idx, opt in enumerate(options, start=1))
    prompt = f"Decision: {question}\n\nOptions:\n{numbered}\n\n"
    prompt += format_constraints(brain.constraints)
    if brain.context is not None:
        prompt += f"Context: {json.dumps(brain.context.model_dump(by_alias=True, exclude_none=True))}\n\n"
    if brain.sources:
        prompt += f"Relevant research results:\n{format_sources(brain.sources)}\n\n"
    prompt += _response_format(DECISION_SUPPORT_RESPONSE_FORMAT)
    return prompt


def build_decision_options_prompt(question: str, brain: LocalBrain) -> str:
    prompt = f"Objective: {brain.objective}\n\nQuestion: {question}\n\n"
    prompt += _response_format(DECISION_OPTIONS_RESPONSE_FORMAT)
    return prompt


def build_final_assembler_prompt(
    brain: LocalBrain,
    prioritizer_output: Dict[str, Any],
    web_research_output: Dict[str, Any],
) -> str:
    """Build the assembly prompt from the brain and the raw upstream outputs."""
    prompt = f"Objective: {brain.objective}\n\n"

    if brain.task_backlog:
        tasks = "\n".join(
            f"- [{t.id}] {t.title}: {t.description or ''}" for t in brain.task_backlog
        )
        prompt += f"Tasks:\n{tasks}\n\n"

    prioritized = prioritizer_output.get("prioritizedTasks") or []
    if prioritized:
        lines = "\n".join(
            f"- [{p.get('taskId')}] priority: {p.get('priority')}, order: {p.get('order')}"
            for p in prioritized
        )
        prompt += f"Prioritized tasks:\n{lines}\n\n"

    next_actions = prioritizer_output.get("nextActions") or []
    if next_actions:
        lines = "\n".join(
            f"{idx}. [{a.get('taskId')}] {a.get('description')}"
            for idx, a in enumerate(next_actions, start=1)
        )
        prompt += f"Next actions:\n{lines}\n\n"

    sources = web_research_output.get("sources") or []
    if sources:
        lines = "\n".join(f"- {s.get('title') or s.get('url')}" for s in sources)
        prompt += f"Research sources:\n{lines}\n\n"

    if brain.risks:
        lines = "\n".join(
            f"- {r.risk}" + (f" (mitigation: {r.mitigation})" if r.mitigation else "")
            for r in brain.risks
        )
        prompt += f"Risks:\n{lines}\n\n"

    if brain.constraints is not None:
        prompt += f"Constraints: {json.dumps(brain.constraints.model_dump(by_alias=True, exclude_none=True))}\n\n"

    prompt += _response_format(FINAL_ASSEMBLER_RESPONSE_FORMAT)
    return prompt


def build_content_summarizer_prompt(title: Optional[str], content: str) -> str:
    prompt = ""
    if title:
        prompt += f"Title: {title}\n\n"
    prompt += f"Content:\n{content}\n\n"
    prompt += _response_format(CONTENT_SUMMARIZER_RESPONSE_FORMAT)
    return prompt


def build_task_analyzer_prompt(
    title: str,
    description: Optional[str],
    summary: Optional[str],
    key_points: List[str],
) -> str:
    prompt = f"Task title: {title}\n"
    prompt += f"Task description: {description or 'None'}\n\n"
    if summary:
        prompt += f"Linked content summary:\n{summary}\n\n"
    if key_points:
        prompt += "Key points:\n" + "\n".join(f"- {p}" for p in key_points) + "\n\n"
    prompt += _response_format(TASK_ANALYZER_RESPONSE_FORMAT)
    return prompt
