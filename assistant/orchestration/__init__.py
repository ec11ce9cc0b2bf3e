"""
Assistant orchestration.

Builds the dependency graph of planning jobs and runs it wave by wave:
    analysis -> [task-breakdown, research-planning]
             -> [prioritization, web-research] -> [decision-support]
             -> final assembly
"""

from assistant.orchestration.orchestrator import AssistantOrchestrator
from assistant.orchestration.scheduler import WaveScheduler
from assistant.orchestration.schemas import (
    AssistantRequest,
    AssistantResponse,
    FailurePolicy,
    Job,
    JobSpec,
)

__all__ = [
    "AssistantOrchestrator",
    "WaveScheduler",
    "AssistantRequest",
    "AssistantResponse",
    "FailurePolicy",
    "Job",
    "JobSpec",
]
