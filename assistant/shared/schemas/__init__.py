"""Base schemas shared across agents."""

from assistant.shared.schemas.base import BaseAgentResult, CamelModel, normalize_choice

__all__ = ["BaseAgentResult", "CamelModel", "normalize_choice"]
