"""LLM client utilities."""

from assistant.shared.llm.client import call_llm_with_usage, get_cached_client

__all__ = ["get_cached_client", "call_llm_with_usage"]
