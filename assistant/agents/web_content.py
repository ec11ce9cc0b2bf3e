"""
Web content fetcher.

Downloads a page and extracts its title and visible text. Network and HTTP
errors are reported as failed results, never raised.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from assistant.shared.contracts import WebContentResult, agent_ids


logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64; rv:133.0) Gecko/20100101 Firefox/133.0"
)

_NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "header", "aside", "form"]


def is_http_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_text(html: str) -> tuple:
    """Return (title, visible text) of an HTML document."""
    soup = BeautifulSoup(html, "html.parser")

    title = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        og_title = soup.find("meta", property="og:title")
        if og_title and og_title.get("content"):
            title = og_title["content"].strip()

    for tag in soup(_NOISE_TAGS):
        tag.decompose()

    root = soup.find("article") or soup.find("main") or soup.body or soup
    text = root.get_text(separator=" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    return title, text


class WebContentFetcher:
    """Fetch and parse web pages."""

    agent_id = agent_ids.WEB_CONTENT

    def __init__(
        self,
        timeout: float = 30.0,
        max_content_length: int = 5_000_000,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            timeout: HTTP request timeout in seconds
            max_content_length: Maximum response size in bytes
            user_agent: Custom user agent string
            transport: Optional httpx transport (used by tests)
        """
        self.timeout = timeout
        self.max_content_length = max_content_length
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self._transport = transport

    def _failure(self, url: str, error: str, status_code: Optional[int] = None) -> WebContentResult:
        logger.warning(f"[agent={self.agent_id}] Fetch failed for {url}: {error}")
        return WebContentResult(
            url=url,
            success=False,
            confidence=0.0,
            error=error,
            status_code=status_code,
        )

    async def fetch(self, url: str) -> WebContentResult:
        """Download ``url`` and extract its text content."""
        if not is_http_url(url):
            return self._failure(url, "Only http(s) URLs can be fetched")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            return self._failure(
                url, f"HTTP {exc.response.status_code}", exc.response.status_code
            )
        except httpx.HTTPError as exc:
            return self._failure(url, f"Request error: {exc}")

        content_length = len(response.content)
        if content_length > self.max_content_length:
            return self._failure(
                url, f"Content too large: {content_length} bytes", response.status_code
            )

        content_type = response.headers.get("content-type", "")
        if "html" in content_type or not content_type:
            title, text = extract_text(response.text)
        elif content_type.startswith("text/"):
            title, text = None, response.text.strip()
        else:
            return self._failure(
                url, f"Unsupported content type: {content_type}", response.status_code
            )

        if not text:
            return self._failure(url, "No text content extracted", response.status_code)

        logger.info(
            f"[agent={self.agent_id}] Fetched {url} | status={response.status_code}, "
            f"chars={len(text)}"
        )
        return WebContentResult(
            url=url,
            success=True,
            confidence=1.0,
            title=title,
            text_content=text,
            content_type=content_type or None,
            status_code=response.status_code,
            fetched_at=datetime.now(timezone.utc).isoformat(),
        )
