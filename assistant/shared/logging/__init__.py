"""Logging configuration and utilities."""

from assistant.shared.logging.config import (
    setup_logging,
    log_job_transition,
    StructuredFormatter,
)

__all__ = [
    "setup_logging",
    "log_job_transition",
    "StructuredFormatter",
]
