"""
Enrichment graph construction.

Builds the graph that sequences fetch -> summarize -> analyze for one task.
Each stage is skipped when its input is missing.
"""

import logging
import uuid
from typing import Optional

from langgraph.graph import END, StateGraph

from assistant.agents.base import LLMCallable
from assistant.agents.content_summarizer import ContentSummarizerAgent
from assistant.agents.task_analyzer import TaskAnalyzerAgent
from assistant.agents.web_content import WebContentFetcher
from assistant.enrichment.config import DEFAULT_CONFIG, EnrichmentConfig
from assistant.enrichment.nodes import EnrichmentNodes, complete_node, find_task_url
from assistant.enrichment.router import route_next_node
from assistant.enrichment.schemas import EnrichmentRequest, EnrichmentState


logger = logging.getLogger(__name__)


_ROUTES = {
    "fetch_node": "fetch_node",
    "summarize_node": "summarize_node",
    "analyze_node": "analyze_node",
    "complete": "complete",
}


def create_enrichment_graph(
    config: Optional[EnrichmentConfig] = None,
    llm: Optional[LLMCallable] = None,
    fetcher: Optional[WebContentFetcher] = None,
):
    """
    Create and compile the enrichment graph.

    The graph structure is:
        Entry -> route_next_node
          -> "fetch_node"     -> fetch     -> route_next_node
          -> "summarize_node" -> summarize -> route_next_node
          -> "analyze_node"   -> analyze   -> route_next_node
          -> "complete"       -> complete  -> END

    Args:
        config: Graph configuration
        llm: Optional LLM callable replacing the OpenAI client
        fetcher: Optional web content fetcher

    Returns:
        Compiled LangGraph application; run it with ``ainvoke``.
    """
    config = config or DEFAULT_CONFIG
    nodes = EnrichmentNodes(
        fetcher=fetcher or WebContentFetcher(timeout=config.fetch_timeout),
        summarizer=ContentSummarizerAgent(
            model=config.model,
            timeout=config.llm_timeout,
            llm=llm,
            max_input_chars=config.max_content_chars,
            max_summary_words=config.max_summary_words,
        ),
        analyzer=TaskAnalyzerAgent(model=config.model, timeout=config.llm_timeout, llm=llm),
    )

    graph = StateGraph(EnrichmentState)

    graph.add_node("fetch_node", nodes.fetch_node)
    graph.add_node("summarize_node", nodes.summarize_node)
    graph.add_node("analyze_node", nodes.analyze_node)
    graph.add_node("complete", complete_node)

    graph.set_conditional_entry_point(route_next_node, _ROUTES)
    graph.add_conditional_edges("fetch_node", route_next_node, _ROUTES)
    graph.add_conditional_edges("summarize_node", route_next_node, _ROUTES)
    graph.add_conditional_edges("analyze_node", route_next_node, _ROUTES)

    graph.add_edge("complete", END)

    return graph.compile()


def create_initial_state(
    request: EnrichmentRequest, session_id: Optional[str] = None
) -> EnrichmentState:
    """Create the initial graph state for a task."""
    return {
        "task_id": request.task_id,
        "title": request.title,
        "description": request.description,
        "metadata": dict(request.metadata),
        "url": find_task_url(request.title, request.description, request.metadata),
        "web_content": None,
        "content_summary": None,
        "task_analysis": None,
        "fetch_attempted": False,
        "summarize_attempted": False,
        "analyze_attempted": False,
        "current_node": "starting",
        "errors": [],
        "messages": [
            {
                "role": "system",
                "agent": "enrichment",
                "content": f"Enrichment started for task {request.task_id}",
            }
        ],
        "session_id": session_id or str(uuid.uuid4()),
    }
