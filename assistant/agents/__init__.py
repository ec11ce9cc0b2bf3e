"""
Planning agents.

Each agent exposes ``agent_id`` and ``async run(brain)`` plus a domain
method. ``build_default_agents`` wires the full set used by the
orchestrator, keyed by agent id.
"""

from typing import Dict, Optional

from assistant.agents.analyst import AnalystAgent
from assistant.agents.base import BaseAgent, LLMCallable, PlanningAgent
from assistant.agents.decision_support import DecisionSupportAgent
from assistant.agents.final_assembler import FinalAssemblerAgent
from assistant.agents.prioritizer import PrioritizerSchedulerAgent
from assistant.agents.research_planner import ResearchPlannerAgent
from assistant.agents.task_breakdown import TaskBreakdownAgent
from assistant.agents.web_content import WebContentFetcher
from assistant.agents.web_researcher import WebResearcherAgent


def build_default_agents(
    model: Optional[str] = None,
    timeout: Optional[float] = None,
    llm: Optional[LLMCallable] = None,
    fetcher: Optional[WebContentFetcher] = None,
    max_next_actions: int = 3,
    max_fetch_urls: int = 5,
) -> Dict[str, object]:
    """Create one instance of every planning agent, keyed by agent id."""
    kwargs = {"llm": llm}
    if model:
        kwargs["model"] = model
    if timeout:
        kwargs["timeout"] = timeout

    agents = [
        AnalystAgent(**kwargs),
        TaskBreakdownAgent(**kwargs),
        ResearchPlannerAgent(**kwargs),
        WebResearcherAgent(fetcher=fetcher, max_urls=max_fetch_urls),
        PrioritizerSchedulerAgent(**kwargs),
        DecisionSupportAgent(**kwargs),
        FinalAssemblerAgent(max_next_actions=max_next_actions, **kwargs),
    ]
    return {agent.agent_id: agent for agent in agents}


__all__ = [
    "BaseAgent",
    "PlanningAgent",
    "LLMCallable",
    "AnalystAgent",
    "TaskBreakdownAgent",
    "ResearchPlannerAgent",
    "WebResearcherAgent",
    "WebContentFetcher",
    "PrioritizerSchedulerAgent",
    "DecisionSupportAgent",
    "FinalAssemblerAgent",
    "build_default_agents",
]
