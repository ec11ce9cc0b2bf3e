"""
Task enrichment pipeline.

Enriches a single kanban task with the content of its linked page:
    fetch -> summarize -> analyze -> done
"""

from assistant.enrichment.build import create_enrichment_graph, create_initial_state
from assistant.enrichment.schemas import EnrichmentState

__all__ = ["EnrichmentState", "create_enrichment_graph", "create_initial_state"]
