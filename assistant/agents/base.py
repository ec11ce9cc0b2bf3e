"""
Base class for LLM-backed agents.

Agents are async: the blocking OpenAI call runs in a worker thread so that
agents in the same wave overlap. An LLM callable can be injected in place
of the OpenAI client, which is how tests run without network access.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from assistant.brain.schemas import LocalBrain
from assistant.shared.llm.client import (
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT_SECONDS,
    call_llm_with_usage,
)
from assistant.shared.response_parser import parse_json_object
from assistant.shared.schemas.base import BaseAgentResult


logger = logging.getLogger(__name__)


# (messages, model) -> response content
LLMCallable = Callable[
    [List[Dict[str, str]], str], Union[str, Awaitable[str]]
]

_RESULT_ENVELOPE_KEYS = {"agentId", "agent_id", "success", "confidence", "error"}


class BaseAgent(ABC):
    """
    Common plumbing for LLM-backed agents.

    Subclasses set ``agent_id`` and implement their domain method.
    """

    agent_id: str = ""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        llm: Optional[LLMCallable] = None,
    ):
        self.model = model
        self.timeout = timeout
        self._llm = llm

    @property
    def _log(self) -> str:
        return f"[graph=assistant] [agent={self.agent_id}] "

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send a system + user message pair and return the response content."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        if self._llm is not None:
            outcome = self._llm(messages, self.model)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            return outcome

        content, usage = await asyncio.to_thread(
            call_llm_with_usage, messages, self.model, None, self.timeout
        )
        logger.debug(
            f"{self._log}LLM call | model={self.model}, "
            f"input_tokens={usage['input_tokens']}, output_tokens={usage['output_tokens']}"
        )
        return content

    async def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """
        Like ``complete`` but parses the response as a JSON object.

        Raises:
            ParseError: If the response holds no JSON object
        """
        raw = await self.complete(system_prompt, user_prompt)
        return parse_json_object(raw)

    def validate_result(self, result_cls, data: Dict[str, Any], confidence: float):
        """Validate parsed LLM data into ``result_cls`` as a successful result."""
        payload = {k: v for k, v in data.items() if k not in _RESULT_ENVELOPE_KEYS}
        payload.update(agent_id=self.agent_id, success=True, confidence=confidence)
        return result_cls.model_validate(payload)

    def error_result(self, error: Exception, result_cls=None) -> BaseAgentResult:
        """Build a failed result for this agent from an exception."""
        message = str(error) or type(error).__name__
        logger.error(f"{self._log}Failed: {message}")
        cls = result_cls or BaseAgentResult
        return cls(agent_id=self.agent_id, success=False, confidence=0.0, error=message)


class PlanningAgent(BaseAgent):
    """An agent the orchestrator runs as a job against the brain."""

    @abstractmethod
    async def run(self, brain: LocalBrain) -> BaseAgentResult:
        """Run the agent against a brain snapshot."""
