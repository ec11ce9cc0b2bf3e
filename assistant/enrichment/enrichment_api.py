"""
FastAPI endpoints for the task enrichment pipeline.
"""

import logging
import uuid

from fastapi import APIRouter, HTTPException

from assistant.enrichment.build import create_enrichment_graph, create_initial_state
from assistant.enrichment.config import DEFAULT_CONFIG
from assistant.enrichment.schemas import EnrichmentRequest, EnrichmentResponse


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/enrichment", tags=["enrichment"])

# Compiled graph instance (shared across requests)
_graph = None


def get_graph():
    """Get or create the shared graph instance."""
    global _graph
    if _graph is None:
        _graph = create_enrichment_graph()
    return _graph


def set_graph(graph) -> None:
    """Replace the shared graph instance."""
    global _graph
    _graph = graph


@router.post(
    "/run",
    response_model=EnrichmentResponse,
    response_model_by_alias=True,
)
async def run_enrichment(request: EnrichmentRequest) -> EnrichmentResponse:
    """Fetch, summarize and analyze a task's linked content."""
    session_id = str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=enrichment] [api=run] "
    logger.info(f"{_log}Pipeline starting | task={request.task_id}")

    try:
        initial_state = create_initial_state(request, session_id)
        final_state = await get_graph().ainvoke(
            initial_state, config={"recursion_limit": DEFAULT_CONFIG.recursion_limit}
        )
    except Exception as e:
        logger.exception(f"{_log}Pipeline failed: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Enrichment failed: {str(e)}",
        )

    errors = final_state.get("errors", [])
    status = "error" if errors else "complete"
    logger.info(f"{_log}Pipeline finished | status={status}, errors={len(errors)}")

    return EnrichmentResponse(
        session_id=session_id,
        task_id=request.task_id,
        status=status,
        url=final_state.get("url"),
        web_content=final_state.get("web_content"),
        content_summary=final_state.get("content_summary"),
        task_analysis=final_state.get("task_analysis"),
        messages=final_state.get("messages", []),
        errors=errors,
    )
