"""
Shared infrastructure for all agents.

Modules:
- llm: OpenAI client with retry logic
- logging: Structured JSON logging
- contracts: Agent output contracts merged into the brain
- schemas: Common base models
- response_parser: JSON extraction from LLM responses
"""

from assistant.shared.llm.client import get_cached_client, call_llm_with_usage
from assistant.shared.logging.config import setup_logging, log_job_transition

__all__ = [
    "get_cached_client",
    "call_llm_with_usage",
    "setup_logging",
    "log_job_transition",
]
