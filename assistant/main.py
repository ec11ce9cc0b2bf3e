"""
FastAPI application entry point.

Assembles the FastAPI app with the assistant and enrichment routers.
"""

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assistant.enrichment.enrichment_api import router as enrichment_router
from assistant.orchestration.assistant_api import router as assistant_router
from assistant.shared.logging import setup_logging


# ============================================================================
# Logging configuration (single source of truth for all agents)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
)

logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,  # Override any prior basicConfig calls
)

# JSON lines for log shippers
if os.getenv("ASSISTANT_LOG_JSON"):
    setup_logging(log_file=os.getenv("ASSISTANT_LOG_FILE"))
    logging.getLogger("assistant").propagate = False

# Quiet noisy third-party loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)


# Create FastAPI app
app = FastAPI(
    title="Planning Assistant",
    description="Multi-agent planning assistant for kanban projects built with LangGraph",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(assistant_router)
app.include_router(enrichment_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Planning Assistant",
        "version": "0.1.0",
        "pipelines": {
            "assistant": {
                "status": "active",
                "endpoints": "/api/assistant",
            },
            "enrichment": {
                "status": "active",
                "endpoints": "/api/enrichment",
            },
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
