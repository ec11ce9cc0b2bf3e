"""
Planning assistant agents.

- orchestration: dependency graph of planning agents around a project brain
- enrichment: fetch -> summarize -> analyze pipeline for a single task
"""

from assistant.enrichment import create_enrichment_graph
from assistant.orchestration import AssistantOrchestrator

__all__ = ["AssistantOrchestrator", "create_enrichment_graph"]
