"""
Graph configuration for the enrichment pipeline.

Centralizes configuration options for the enrichment LangGraph workflow.
"""

from dataclasses import dataclass

from assistant.shared.llm.client import DEFAULT_MODEL


@dataclass
class EnrichmentConfig:
    """
    Configuration for the enrichment graph.

    Attributes:
        recursion_limit: Maximum number of graph steps
        model: LLM model for summarizing and analyzing
        llm_timeout: LLM call timeout in seconds
        fetch_timeout: Web fetch timeout in seconds
        max_content_chars: Characters of page text sent to the summarizer
        max_summary_words: Target maximum summary length
    """

    recursion_limit: int = 10
    model: str = DEFAULT_MODEL
    llm_timeout: int = 60
    fetch_timeout: float = 30.0
    max_content_chars: int = 12_000
    max_summary_words: int = 150


# Default configuration instance
DEFAULT_CONFIG = EnrichmentConfig()
