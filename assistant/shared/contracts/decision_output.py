"""
Decision support output contract.
"""

from typing import Literal, Optional

from assistant.brain.schemas import Decision
from assistant.shared.schemas.base import BaseAgentResult


class DecisionSupportResult(BaseAgentResult):
    """Contract for decision support output. Upserted by question text."""

    agent_id: Literal["decision-support"] = "decision-support"
    decision: Optional[Decision] = None
