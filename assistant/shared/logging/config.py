"""
Structured logging configuration.

JSON-lines output for scheduler job transitions, so a run can be traced
job by job in a log shipper.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Keys: timestamp (UTC ISO), level, logger, message, plus ``extra`` when the
    record carries structured data and ``exception`` when it carries a
    traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        structured = getattr(record, "extra", None)
        if structured is not None:
            entry["extra"] = structured

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "assistant",
) -> logging.Logger:
    """
    Send ``logger_name`` and its children to stdout (and optionally a file)
    as JSON lines. Existing handlers on that logger are replaced.

    Args:
        level: Logging level
        log_file: Optional path of a file receiving the same lines
        logger_name: Root of the logger tree to configure

    Returns:
        The configured logger.
    """
    target = logging.getLogger(logger_name)
    target.setLevel(level)
    target.handlers = []

    formatter = StructuredFormatter()
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        target.addHandler(handler)

    return target


def log_job_transition(
    event: str,
    job_id: str,
    agent_id: str,
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
) -> None:
    """
    Emit one scheduler event (job_started, job_succeeded, job_failed,
    job_skipped) as a structured record.

    Args:
        event: Event name
        job_id: Job id within the run
        agent_id: Agent the job invokes
        extra: Event details, e.g. the failure message
        logger: Logger to emit on; defaults to the "assistant" logger
        level: Record level
    """
    logger = logger or logging.getLogger("assistant")
    if not logger.isEnabledFor(level):
        return

    payload: Dict[str, Any] = {"event": event, "job": {"id": job_id, "agent_id": agent_id}}
    if extra:
        payload["extra"] = extra

    record = logger.makeRecord(
        logger.name,
        level,
        "",
        0,
        f"Job transition: {event} ({job_id})",
        args=(),
        exc_info=None,
    )
    record.extra = payload
    logger.handle(record)
