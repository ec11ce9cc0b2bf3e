"""
Content summarizer agent for the enrichment pipeline.
"""

import logging
from typing import Optional

from pydantic import ValidationError

from assistant.agents.base import BaseAgent
from assistant.agents.prompts.builders import build_content_summarizer_prompt
from assistant.agents.prompts.templates import CONTENT_SUMMARIZER_SYSTEM_PROMPT
from assistant.shared.contracts import ContentSummaryResult, agent_ids
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


SUMMARIZER_CONFIDENCE = 0.8


class ContentSummarizerAgent(BaseAgent):
    agent_id = agent_ids.CONTENT_SUMMARIZER

    def __init__(
        self, *args, max_input_chars: int = 12_000, max_summary_words: int = 150, **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.max_input_chars = max_input_chars
        self.max_summary_words = max_summary_words

    async def summarize(self, content: str, title: Optional[str] = None) -> ContentSummaryResult:
        """Summarize page text. Empty content is a failure."""
        if not content or not content.strip():
            return ContentSummaryResult(
                success=False, confidence=0.0, error="No content to summarize"
            )

        word_count = len(content.split())
        logger.info(f"{self._log}Summarizing | words={word_count}")

        try:
            raw = await self.complete(
                CONTENT_SUMMARIZER_SYSTEM_PROMPT.format(max_summary_words=self.max_summary_words),
                build_content_summarizer_prompt(title, content[: self.max_input_chars]),
            )
            data = parse_json_object(raw)
            result = self.validate_result(ContentSummaryResult, data, SUMMARIZER_CONFIDENCE)
        except (ParseError, ValidationError) as e:
            return self.error_result(ParseError(f"Unparseable summary: {e}"), ContentSummaryResult)
        except Exception as e:
            return self.error_result(e, ContentSummaryResult)

        result.word_count = word_count
        return result
