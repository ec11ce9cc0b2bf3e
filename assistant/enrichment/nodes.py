"""
Graph nodes for the enrichment pipeline.

Each node calls one agent and writes its output into the matching handoff
slot. Agent errors are caught into ``errors`` so the graph always reaches
completion.
"""

import logging
import re
from typing import Any, Dict, Optional

from assistant.agents.content_summarizer import ContentSummarizerAgent
from assistant.agents.task_analyzer import TaskAnalyzerAgent
from assistant.agents.web_content import WebContentFetcher, is_http_url
from assistant.enrichment.schemas import EnrichmentState


logger = logging.getLogger(__name__)


_URL_PATTERN = re.compile(r"https?://[^\s<>\"')\]]+")


def find_task_url(
    title: str, description: Optional[str] = None, metadata: Optional[dict] = None
) -> Optional[str]:
    """URL from the task metadata, else the first URL in title or description."""
    candidate = (metadata or {}).get("url")
    if isinstance(candidate, str) and is_http_url(candidate):
        return candidate.strip()
    for text in (title, description or ""):
        match = _URL_PATTERN.search(text)
        if match:
            return match.group(0).rstrip(".,;:")
    return None


def _message(content: str) -> Dict[str, str]:
    return {"role": "system", "agent": "enrichment", "content": content}


class EnrichmentNodes:
    """Node functions bound to the enrichment agents."""

    def __init__(
        self,
        fetcher: WebContentFetcher,
        summarizer: ContentSummarizerAgent,
        analyzer: TaskAnalyzerAgent,
    ):
        self.fetcher = fetcher
        self.summarizer = summarizer
        self.analyzer = analyzer

    async def fetch_node(self, state: EnrichmentState) -> Dict[str, Any]:
        """Download the task's linked page."""
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=enrichment] [node=fetch] "
        url = state["url"]
        logger.info(f"{_log}Entering node | url={url}")

        try:
            result = await self.fetcher.fetch(url)
        except Exception as e:
            logger.exception(f"{_log}Web content agent failed: {e}")
            return {
                "fetch_attempted": True,
                "current_node": "fetch_failed",
                "errors": [f"Web content agent error: {str(e)}"],
                "messages": [_message(f"Fetching {url} failed: {str(e)}")],
            }

        update: Dict[str, Any] = {
            "fetch_attempted": True,
            "web_content": result.model_dump(by_alias=True),
            "current_node": "fetch_complete" if result.success else "fetch_failed",
            "messages": [
                _message(
                    f"Fetched {url}" if result.success else f"Fetching {url} failed: {result.error}"
                )
            ],
        }
        if not result.success:
            update["errors"] = [f"Web content agent error: {result.error}"]
        return update

    async def summarize_node(self, state: EnrichmentState) -> Dict[str, Any]:
        """Summarize the fetched page."""
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=enrichment] [node=summarize] "
        web_content = state.get("web_content") or {}
        logger.info(f"{_log}Entering node | chars={len(web_content.get('textContent') or '')}")

        try:
            result = await self.summarizer.summarize(
                web_content.get("textContent") or "", web_content.get("title")
            )
        except Exception as e:
            logger.exception(f"{_log}Content summarizer failed: {e}")
            return {
                "summarize_attempted": True,
                "current_node": "summarize_failed",
                "errors": [f"Content summarizer error: {str(e)}"],
                "messages": [_message(f"Summarizing failed: {str(e)}")],
            }

        update: Dict[str, Any] = {
            "summarize_attempted": True,
            "current_node": "summarize_complete" if result.success else "summarize_failed",
            "messages": [
                _message(
                    f"Summarized {result.word_count} words"
                    if result.success
                    else f"Summarizing failed: {result.error}"
                )
            ],
        }
        if result.success:
            update["content_summary"] = result.model_dump(by_alias=True)
        else:
            update["errors"] = [f"Content summarizer error: {result.error}"]
        return update

    async def analyze_node(self, state: EnrichmentState) -> Dict[str, Any]:
        """Analyze the task, using the summary when there is one."""
        session_id = state.get("session_id", "unknown")
        _log = f"[session={session_id}] [graph=enrichment] [node=analyze] "
        summary = state.get("content_summary") or {}
        logger.info(f"{_log}Entering node | has_summary={bool(summary)}")

        try:
            result = await self.analyzer.analyze_task(
                state["title"],
                state.get("description"),
                summary.get("summary"),
                summary.get("keyPoints") or [],
            )
        except Exception as e:
            logger.exception(f"{_log}Task analyzer failed: {e}")
            return {
                "analyze_attempted": True,
                "current_node": "analyze_failed",
                "errors": [f"Task analyzer error: {str(e)}"],
                "messages": [_message(f"Task analysis failed: {str(e)}")],
            }

        update: Dict[str, Any] = {
            "analyze_attempted": True,
            "current_node": "analyze_complete" if result.success else "analyze_failed",
            "messages": [
                _message(
                    f"Task analyzed | tags={len(result.tags)}"
                    if result.success
                    else f"Task analysis failed: {result.error}"
                )
            ],
        }
        if result.success:
            update["task_analysis"] = result.model_dump(by_alias=True)
        else:
            update["errors"] = [f"Task analyzer error: {result.error}"]
        return update


def complete_node(state: EnrichmentState) -> Dict[str, Any]:
    """Final node that marks the enrichment pipeline as complete."""
    session_id = state.get("session_id", "unknown")
    _log = f"[session={session_id}] [graph=enrichment] [node=complete] "

    has_content = state.get("web_content") is not None
    has_summary = state.get("content_summary") is not None
    has_analysis = state.get("task_analysis") is not None
    num_errors = len(state.get("errors", []))

    logger.info(
        f"{_log}Pipeline complete | "
        f"content={'done' if has_content else 'none'}, "
        f"summary={'done' if has_summary else 'none'}, "
        f"analysis={'done' if has_analysis else 'MISSING'}, "
        f"errors={num_errors} -> END"
    )

    return {
        "current_node": "complete",
        "messages": [
            _message(
                f"Enrichment complete. "
                f"Summary: {'done' if has_summary else 'none'}. "
                f"Analysis: {'done' if has_analysis else 'missing'}."
            )
        ],
    }
