"""
FastAPI endpoints for the assistant orchestrator.

Runs planning requests and exposes the persisted brains. A request id that
was already answered returns the stored response without re-running, and a
request id still running is joined rather than started again.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Dict, Optional

from fastapi import APIRouter, HTTPException

from assistant.brain.schemas import LocalBrain
from assistant.brain.store import BrainRepository, InMemoryBrainRepository, JsonFileBrainRepository
from assistant.orchestration.config import config_from_env
from assistant.orchestration.errors import GraphConstructionError
from assistant.orchestration.orchestrator import AssistantOrchestrator
from assistant.orchestration.schemas import AssistantRequest, AssistantResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])

MAX_STORED_RESPONSES = 512

# Delivered responses by request id, least recently used first
# (replace with Redis/DB in production)
_responses: "OrderedDict[str, AssistantResponse]" = OrderedDict()

# Runs still in progress by request id
_in_flight: Dict[str, "asyncio.Task[AssistantResponse]"] = {}

# Shared orchestrator instance
_orchestrator: Optional[AssistantOrchestrator] = None


def get_orchestrator() -> AssistantOrchestrator:
    """Get or create the shared orchestrator from environment configuration."""
    global _orchestrator
    if _orchestrator is None:
        config = config_from_env()
        repository: BrainRepository = (
            JsonFileBrainRepository(config.brain_dir)
            if config.brain_dir
            else InMemoryBrainRepository()
        )
        _orchestrator = AssistantOrchestrator(repository=repository, config=config)
    return _orchestrator


def set_orchestrator(orchestrator: Optional[AssistantOrchestrator]) -> None:
    """Replace the shared orchestrator and forget delivered responses."""
    global _orchestrator
    _orchestrator = orchestrator
    _responses.clear()
    _in_flight.clear()


def _store_response(request_id: str, response: AssistantResponse) -> None:
    _responses[request_id] = response
    _responses.move_to_end(request_id)
    while len(_responses) > MAX_STORED_RESPONSES:
        _responses.popitem(last=False)


async def _process(request: AssistantRequest) -> AssistantResponse:
    result = await get_orchestrator().process(request)
    response = result.to_response()
    _store_response(request.request_id, response)
    return response


@router.post(
    "/run",
    response_model=AssistantResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def run_assistant(request: AssistantRequest) -> AssistantResponse:
    """
    Run the planning pipeline for a request.

    The response is stored by request id; re-delivery returns it unchanged.
    Concurrent deliveries of one request id share a single run.
    """
    request_id = request.request_id
    _log = f"[request={request_id}] [graph=assistant] [api=run] "

    if request_id in _responses:
        logger.info(f"{_log}Request already answered, returning stored response")
        _responses.move_to_end(request_id)
        return _responses[request_id]

    task = _in_flight.get(request_id)
    if task is None:
        task = asyncio.create_task(_process(request))
        _in_flight[request_id] = task
        task.add_done_callback(lambda _: _in_flight.pop(request_id, None))
    else:
        logger.info(f"{_log}Request already running, waiting for its response")

    try:
        # Shared by every delivery of this request id; callers leaving must not cancel it
        response = await asyncio.shield(task)
    except GraphConstructionError as e:
        logger.exception(f"{_log}Job graph construction failed: {e}")
        raise HTTPException(status_code=500, detail=f"Job graph construction failed: {e}")
    except Exception as e:
        logger.exception(f"{_log}Pipeline failed: {e}")
        raise HTTPException(status_code=500, detail=f"Pipeline execution failed: {str(e)}")

    logger.info(
        f"{_log}Responded | success={response.success}, "
        f"errors={len(response.errors or [])}, elapsed_ms={response.processing_time_ms}"
    )
    return response


@router.get(
    "/brain/{project_id}",
    response_model=LocalBrain,
    response_model_by_alias=True,
)
async def get_brain(project_id: str) -> LocalBrain:
    """Return the persisted brain of a project."""
    brain = get_orchestrator().repository.load(project_id)
    if brain is None:
        raise HTTPException(status_code=404, detail=f"No brain for project {project_id}")
    return brain


@router.delete("/brain/{project_id}")
async def delete_brain(project_id: str) -> Dict[str, str]:
    """Delete the persisted brain of a project."""
    if not get_orchestrator().repository.delete(project_id):
        raise HTTPException(status_code=404, detail=f"No brain for project {project_id}")
    return {"status": "deleted", "project_id": project_id}
