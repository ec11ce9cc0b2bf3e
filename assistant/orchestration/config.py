"""
Configuration for the assistant orchestrator.

Centralizes model, timeout, failure policy and persistence options.
Values can be overridden explicitly or read from the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from assistant.orchestration.schemas import FailurePolicy
from assistant.shared.llm.client import DEFAULT_MODEL, DEFAULT_TIMEOUT_SECONDS


@dataclass
class AssistantConfig:
    """
    Configuration for an orchestrator run.

    Attributes:
        model: LLM model used by every planning agent
        llm_timeout: Per-request LLM timeout in seconds
        failure_policy: How dependents of a failed job are treated
        max_next_actions: Number of next actions in the deliverable
        brain_dir: Directory for JSON brain files; in-memory when None
        fetch_timeout: Timeout for web research fetches in seconds
        max_fetch_urls: Maximum URL search terms fetched per run
    """

    model: str = DEFAULT_MODEL
    llm_timeout: float = DEFAULT_TIMEOUT_SECONDS
    failure_policy: FailurePolicy = FailurePolicy.RESOLVE

    # Deliverable
    max_next_actions: int = 3

    # Persistence
    brain_dir: Optional[str] = None

    # Web research
    fetch_timeout: float = 30.0
    max_fetch_urls: int = 5


# Default configuration instance
DEFAULT_CONFIG = AssistantConfig()


def get_config(
    model: Optional[str] = None,
    llm_timeout: Optional[float] = None,
    failure_policy: Optional[FailurePolicy] = None,
    max_next_actions: Optional[int] = None,
    brain_dir: Optional[str] = None,
) -> AssistantConfig:
    """
    Create a configuration with optional overrides.

    Args:
        model: Override for LLM model
        llm_timeout: Override for LLM timeout
        failure_policy: Override for the failure policy
        max_next_actions: Override for the number of next actions
        brain_dir: Override for the brain directory

    Returns:
        AssistantConfig with specified overrides applied
    """
    return AssistantConfig(
        model=model or DEFAULT_CONFIG.model,
        llm_timeout=llm_timeout or DEFAULT_CONFIG.llm_timeout,
        failure_policy=failure_policy or DEFAULT_CONFIG.failure_policy,
        max_next_actions=max_next_actions
        if max_next_actions is not None
        else DEFAULT_CONFIG.max_next_actions,
        brain_dir=brain_dir or DEFAULT_CONFIG.brain_dir,
    )


def config_from_env() -> AssistantConfig:
    """
    Build a configuration from ASSISTANT_* environment variables.

    Raises:
        ValueError: If ASSISTANT_FAILURE_POLICY or ASSISTANT_LLM_TIMEOUT is invalid
    """
    policy = os.environ.get("ASSISTANT_FAILURE_POLICY")
    timeout = os.environ.get("ASSISTANT_LLM_TIMEOUT")
    return get_config(
        model=os.environ.get("ASSISTANT_MODEL"),
        llm_timeout=float(timeout) if timeout else None,
        failure_policy=FailurePolicy(policy.strip().lower()) if policy else None,
        brain_dir=os.environ.get("ASSISTANT_BRAIN_DIR"),
    )
