"""
Web researcher agent.

Follows the research plan: every search term that is a URL is fetched
concurrently and turned into a source with a heuristic trust level, key
takeaways and extracted facts.
"""

import asyncio
import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from assistant.agents.web_content import WebContentFetcher, is_http_url
from assistant.brain.schemas import LocalBrain, ResearchPlan, Source
from assistant.shared.contracts import Fact, WebResearcherResult, agent_ids


logger = logging.getLogger(__name__)


HIGH_TRUST_MARKERS = ("docs.", "github.com", "stackoverflow.com", "mdn.", "w3.org")
MEDIUM_TRUST_MARKERS = ("medium.com", "dev.to", "blog.")

MAX_TAKEAWAYS = 5
MAX_FACTS_PER_SOURCE = 10
MAX_TOP_FINDINGS = 10
MAX_FACTS = 20
FINDING_PREVIEW_CHARS = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_FACT_MARKERS = ("is ", "are ", "can ", "must ")


def estimate_trust_level(url: str) -> float:
    """Heuristic trust level from the URL's host."""
    host = (urlparse(url).hostname or "").lower()
    if any(marker in host for marker in HIGH_TRUST_MARKERS):
        return 0.9
    if any(marker in host for marker in MEDIUM_TRUST_MARKERS):
        return 0.7
    return 0.5


def _sentences(content: str) -> List[str]:
    return [s.strip() for s in _SENTENCE_SPLIT.split(content) if s.strip()]


def extract_key_takeaways(content: str) -> List[str]:
    """First sentences of reasonable length (50 to 300 characters)."""
    return [s for s in _sentences(content) if 50 < len(s) < 300][:MAX_TAKEAWAYS]


def extract_facts(content: str) -> List[str]:
    """Sentences that look factual: contain a digit or a copula-like verb."""
    facts = []
    for sentence in _sentences(content):
        if not 30 < len(sentence) < 200:
            continue
        lowered = sentence.lower()
        if re.search(r"\d", sentence) or any(m in lowered for m in _FACT_MARKERS):
            facts.append(sentence)
    return facts[:MAX_FACTS_PER_SOURCE]


class WebResearcherAgent:
    """Turns URL search terms of the research plan into sources."""

    agent_id = agent_ids.WEB_RESEARCHER

    def __init__(self, fetcher: Optional[WebContentFetcher] = None, max_urls: int = 5):
        self.fetcher = fetcher or WebContentFetcher()
        self.max_urls = max_urls

    async def research(
        self, research_plan: Optional[ResearchPlan], objective: str = ""
    ) -> WebResearcherResult:
        """
        Research according to ``research_plan``.

        Without search terms there is nothing to do and the result is a
        confident empty success. Failed fetches are logged and skipped.
        """
        _log = f"[graph=assistant] [agent={self.agent_id}] "
        terms = research_plan.search_terms if research_plan else []
        logger.info(f"{_log}Researching | search_terms={len(terms)}")

        if not terms:
            return WebResearcherResult(success=True, confidence=1.0)

        urls = [t.strip() for t in terms if is_http_url(t)][: self.max_urls]
        fetched = await asyncio.gather(
            *(self.fetcher.fetch(url) for url in urls), return_exceptions=True
        )

        sources: List[Source] = []
        facts: List[Fact] = []
        top_findings: List[str] = []
        for url, page in zip(urls, fetched):
            if isinstance(page, BaseException):
                logger.error(f"{_log}Failed to download content from {url}: {page}")
                continue
            if not page.success or not page.text_content:
                continue
            text = page.text_content
            sources.append(
                Source(
                    url=url,
                    title=page.title,
                    date=page.fetched_at,
                    trust_level=estimate_trust_level(url),
                    key_takeaways=extract_key_takeaways(text),
                )
            )
            facts.extend(Fact(fact=f, source=url) for f in extract_facts(text))
            top_findings.append(f"{page.title or url}: {text[:FINDING_PREVIEW_CHARS]}...")

        logger.info(
            f"{_log}Research complete | urls={len(urls)}, sources={len(sources)}, facts={len(facts)}"
        )
        return WebResearcherResult(
            success=True,
            confidence=0.8 if sources else 0.5,
            sources=sources,
            top_findings=top_findings[:MAX_TOP_FINDINGS],
            facts=facts[:MAX_FACTS],
        )

    async def run(self, brain: LocalBrain) -> WebResearcherResult:
        return await self.research(brain.research_plan, brain.objective)
