"""Exceptions raised by the orchestration layer."""


class OrchestrationError(Exception):
    """Base class for orchestration failures."""

    pass


class GraphConstructionError(OrchestrationError):
    """Raised when a job graph references unknown or duplicate job ids."""

    pass


class AgentFailedError(OrchestrationError):
    """Raised by a job whose agent returned ``success=False``."""

    def __init__(self, agent_id: str, message: str):
        self.agent_id = agent_id
        super().__init__(message)
