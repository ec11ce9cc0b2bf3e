"""
OpenAI client with retry logic.

Agents call ``call_llm_with_usage`` from a worker thread. Any
OpenAI-compatible endpoint works: set OPENAI_BASE_URL to point at a local
Ollama, for example.
"""

import os
from typing import Dict, List, Optional, Tuple

from openai import OpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from dotenv import load_dotenv
load_dotenv()

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_TIMEOUT_SECONDS = 120.0

# Module-level cache for OpenAI client
_client: Optional[OpenAI] = None


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses OPENAI_API_KEY for authentication and the optional OPENAI_BASE_URL
    for self-hosted endpoints.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key, base_url=os.environ.get("OPENAI_BASE_URL") or None)
    return _client


def _usage_of(response) -> Dict[str, int]:
    usage = getattr(response, "usage", None)
    if usage is None:
        return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    return {
        "input_tokens": usage.prompt_tokens,
        "output_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((Exception,)),
    reraise=True,
)
def call_llm_with_usage(
    messages: List[Dict[str, str]],
    model: str = DEFAULT_MODEL,
    client: Optional[OpenAI] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Tuple[str, Dict[str, int]]:
    """
    Call the Chat Completion API with automatic retries.

    Args:
        messages: List of message dicts with 'role' and 'content' keys
        model: Model identifier to use
        client: Optional client instance. If not provided, uses cached client.
        timeout: Per-request timeout in seconds

    Returns:
        Tuple of (response content, usage dict with input/output/total tokens)

    Raises:
        Exception: The last error once all three attempts have failed.
    """
    if client is None:
        client = get_cached_client()

    response = client.chat.completions.create(
        model=model,
        messages=messages,
        timeout=timeout,
    )

    return (response.choices[0].message.content or "").strip(), _usage_of(response)
