"""
Local brain: the shared knowledge record built up during a run.

Merge operations live in ``assistant.brain.merge``; sessions and
repositories in ``assistant.brain.store``.
"""

from assistant.brain.schemas import HistoryEntry, LocalBrain, create_brain

__all__ = ["HistoryEntry", "LocalBrain", "create_brain"]
