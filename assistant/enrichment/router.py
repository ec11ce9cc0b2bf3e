"""
Routing logic for the enrichment graph.

Determines which stage to run next based on what has been populated.
"""

import logging
from typing import Literal

from assistant.enrichment.schemas import EnrichmentState


logger = logging.getLogger(__name__)


def route_next_node(
    state: EnrichmentState,
) -> Literal["fetch_node", "summarize_node", "analyze_node", "complete"]:
    """
    Determine the next node to execute based on populated state.

    Routing logic:
    1. A URL that has not been fetched yet -> fetch
    2. Fetched content that has not been summarized yet -> summarize
    3. No analysis attempted yet -> analyze
    4. Otherwise -> complete

    Args:
        state: Current enrichment state

    Returns:
        Name of the next node to execute
    """
    session_id = state.get("session_id", "unknown")
    _log = f"[session={session_id}] [graph=enrichment] [router=route_next_node] "

    web_content = state.get("web_content") or {}
    has_content = bool(web_content.get("success") and web_content.get("textContent"))

    if state.get("url") and not state.get("fetch_attempted"):
        next_node = "fetch_node"
    elif has_content and not state.get("summarize_attempted"):
        next_node = "summarize_node"
    elif not state.get("analyze_attempted"):
        next_node = "analyze_node"
    else:
        next_node = "complete"

    logger.info(
        f"{_log}Routing to '{next_node}' | url={state.get('url') is not None}, "
        f"content={has_content}, summary={state.get('content_summary') is not None}, "
        f"analysis={state.get('task_analysis') is not None}"
    )
    return next_node
