"""
Best-effort progress reporting.

Every event is collected in order; the optional listener is notified
without ever being able to break or stall the run.
"""

import asyncio
import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

from assistant.orchestration.schemas import ProgressEvent


logger = logging.getLogger(__name__)


STAGE_PROGRESS: Dict[str, int] = {
    "analysis": 10,
    "local-brain-prep": 20,
    "task-breakdown": 35,
    "research-planning": 40,
    "web-research": 60,
    "prioritization": 70,
    "decision-support": 80,
    "final-assembly": 90,
    "completed": 100,
    "error": 0,
}

ProgressListener = Callable[[ProgressEvent], Union[None, Awaitable[None]]]


class ProgressReporter:
    """Collects progress events for one request and forwards them to a listener."""

    def __init__(self, request_id: str, listener: Optional[ProgressListener] = None):
        self.request_id = request_id
        self.history: List[ProgressEvent] = []
        self._listener = listener
        # Pending listener tasks
        self._background: Set[asyncio.Task] = set()

    def report(
        self, stage: str, message: str, details: Optional[Dict[str, Any]] = None
    ) -> ProgressEvent:
        """Record an event for ``stage`` and notify the listener."""
        event = ProgressEvent(
            request_id=self.request_id,
            stage=stage,
            progress=STAGE_PROGRESS.get(stage, 0),
            message=message,
            details=details,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.history.append(event)
        logger.debug(
            f"[request={self.request_id}] [progress] {stage} ({event.progress}%) {message}"
        )
        if self._listener is not None:
            self._notify(event)
        return event

    def _notify(self, event: ProgressEvent) -> None:
        try:
            outcome = self._listener(event)
        except Exception as e:
            logger.warning(f"[request={self.request_id}] Progress listener failed: {e}")
            return

        if not inspect.isawaitable(outcome):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            if inspect.iscoroutine(outcome):
                outcome.close()
            logger.warning(f"[request={self.request_id}] Progress listener not scheduled: {e}")
            return

        task = asyncio.ensure_future(outcome, loop=loop)
        self._background.add(task)
        task.add_done_callback(self._on_listener_done)

    def _on_listener_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"[request={self.request_id}] Progress listener failed: {exc}")
