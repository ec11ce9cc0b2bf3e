"""
Task analyzer agent for the enrichment pipeline.

Derives context, tags, priority, estimated duration and an optionally
clearer title/description for a kanban task.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from assistant.agents.base import BaseAgent
from assistant.agents.prompts.builders import build_task_analyzer_prompt
from assistant.agents.prompts.templates import TASK_ANALYZER_SYSTEM_PROMPT
from assistant.shared.contracts import TaskAnalysisResult, agent_ids
from assistant.shared.response_parser import ParseError, parse_json_object


logger = logging.getLogger(__name__)


ANALYZER_CONFIDENCE = 0.75
MAX_TAGS = 8


class TaskAnalyzerAgent(BaseAgent):
    agent_id = agent_ids.TASK_ANALYZER

    async def analyze_task(
        self,
        title: str,
        description: Optional[str] = None,
        summary: Optional[str] = None,
        key_points: Optional[List[str]] = None,
    ) -> TaskAnalysisResult:
        logger.info(f"{self._log}Analyzing task | has_summary={summary is not None}")

        try:
            raw = await self.complete(
                TASK_ANALYZER_SYSTEM_PROMPT,
                build_task_analyzer_prompt(title, description, summary, key_points or []),
            )
            data = parse_json_object(raw)
            result = self.validate_result(TaskAnalysisResult, data, ANALYZER_CONFIDENCE)
        except (ParseError, ValidationError) as e:
            return self.error_result(ParseError(f"Unparseable task analysis: {e}"), TaskAnalysisResult)
        except Exception as e:
            return self.error_result(e, TaskAnalysisResult)

        result.tags = result.tags[:MAX_TAGS]
        # Suggestions identical to the current text are noise
        if result.suggested_title and result.suggested_title.strip() == title.strip():
            result.suggested_title = None
        if result.suggested_description and description and (
            result.suggested_description.strip() == description.strip()
        ):
            result.suggested_description = None
        return result
