"""
Brain session and persistence.

``BrainSession`` owns one run's brain: jobs read deep-copied snapshots and
write through ``apply``. ``BrainRepository`` is the load/save boundary keyed
by project id.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from assistant.brain.merge import merge_result
from assistant.brain.schemas import (
    BrainConstraints,
    BrainContext,
    Deliverable,
    LocalBrain,
    create_brain,
)
from assistant.shared.schemas.base import BaseAgentResult


logger = logging.getLogger(__name__)


class BrainSession:
    """The brain of a single run."""

    def __init__(self, brain: LocalBrain, run_id: str):
        self._brain = brain
        self.run_id = run_id
        self._lock = asyncio.Lock()

    @property
    def brain(self) -> LocalBrain:
        return self._brain

    def snapshot(self) -> LocalBrain:
        """Deep copy of the current brain; safe to hand to an agent."""
        return self._brain.model_copy(deep=True)

    async def apply(
        self, result: BaseAgentResult, now: Optional[datetime] = None
    ) -> LocalBrain:
        """Merge an agent result into the brain and return a fresh snapshot."""
        async with self._lock:
            self._brain = merge_result(self._brain, result, self.run_id, now)
            logger.debug(
                f"[run={self.run_id}] Merged {result.agent_id} result | "
                f"history={len(self._brain.history)}"
            )
            return self._brain.model_copy(deep=True)


class BrainRepository(ABC):
    """Key/value persistence of brains by project id."""

    @abstractmethod
    def load(self, project_id: str) -> Optional[LocalBrain]:
        ...

    @abstractmethod
    def save(self, project_id: str, brain: LocalBrain) -> None:
        ...

    @abstractmethod
    def delete(self, project_id: str) -> bool:
        ...

    def load_or_create(
        self,
        project_id: str,
        objective: str,
        context: Optional[BrainContext] = None,
        constraints: Optional[BrainConstraints] = None,
        deliverables: Optional[List[Deliverable]] = None,
    ) -> LocalBrain:
        """Load the project's brain, or create a fresh one from the request."""
        existing = self.load(project_id)
        if existing is not None:
            logger.info(
                f"[project={project_id}] Loaded brain | "
                f"tasks={len(existing.task_backlog)}, history={len(existing.history)}"
            )
            return existing
        logger.info(f"[project={project_id}] Creating new brain")
        return create_brain(objective, context, constraints, deliverables)


class InMemoryBrainRepository(BrainRepository):
    """Process-local repository, mainly for tests and single-worker setups."""

    def __init__(self):
        self._brains: Dict[str, LocalBrain] = {}

    def load(self, project_id: str) -> Optional[LocalBrain]:
        brain = self._brains.get(project_id)
        return brain.model_copy(deep=True) if brain is not None else None

    def save(self, project_id: str, brain: LocalBrain) -> None:
        self._brains[project_id] = brain.model_copy(deep=True)

    def delete(self, project_id: str) -> bool:
        return self._brains.pop(project_id, None) is not None


_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


class JsonFileBrainRepository(BrainRepository):
    """One JSON file per project in a directory."""

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, project_id: str) -> Path:
        return self.directory / f"{_SAFE_ID.sub('_', project_id)}.json"

    def load(self, project_id: str) -> Optional[LocalBrain]:
        path = self._path(project_id)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return LocalBrain.model_validate(data)

    def save(self, project_id: str, brain: LocalBrain) -> None:
        path = self._path(project_id)
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(brain.model_dump_json(by_alias=True, indent=2))
        tmp_path.replace(path)
        logger.debug(f"[project={project_id}] Brain saved to {path}")

    def delete(self, project_id: str) -> bool:
        path = self._path(project_id)
        if not path.exists():
            return False
        path.unlink()
        return True
