"""
Wave scheduler for job graphs.

Executes a set of jobs wave by wave: every job whose dependencies have all
completed is launched concurrently, and the next wave starts only after the
whole current wave has finished. Failed jobs are recorded, never retried,
and never propagate out of the scheduler.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Sequence, Set

from assistant.orchestration.errors import AgentFailedError, GraphConstructionError
from assistant.orchestration.schemas import FailurePolicy, Job, SchedulerOutcome
from assistant.shared.logging import log_job_transition


logger = logging.getLogger(__name__)


def _failure_message(exc: BaseException) -> str:
    if isinstance(exc, AgentFailedError):
        return str(exc)
    return str(exc) or type(exc).__name__


class WaveScheduler:
    """
    Barrier-synchronized DAG executor.

    Args:
        failure_policy: RESOLVE lets dependents of a failed job run;
            SKIP_DEPENDENTS marks them skipped instead
        on_job_start: Called synchronously for each job as its wave launches
        request_id: Used only to prefix log lines
        clock: Monotonic clock used for start/finish timestamps
    """

    def __init__(
        self,
        failure_policy: FailurePolicy = FailurePolicy.RESOLVE,
        on_job_start: Optional[Callable[[Job], None]] = None,
        request_id: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_policy = failure_policy
        self.on_job_start = on_job_start
        self.request_id = request_id or "unknown"
        self._clock = clock

    async def _run_job(self, job: Job, outcome: SchedulerOutcome):
        outcome.started_at[job.id] = self._clock()
        try:
            return await job.run()
        finally:
            outcome.finished_at[job.id] = self._clock()

    def _skip_blocked(
        self,
        ready: List[Job],
        unsuccessful: Set[str],
        completed: Set[str],
        outcome: SchedulerOutcome,
    ) -> List[Job]:
        runnable = []
        for job in ready:
            blocked_by = sorted(job.dependencies & unsuccessful)
            if not blocked_by:
                runnable.append(job)
                continue
            message = (
                f"Job {job.id} ({job.agent_id}) skipped: "
                f"dependency {blocked_by[0]} did not succeed"
            )
            logger.warning(f"[request={self.request_id}] [graph=scheduler] {message}")
            log_job_transition("job_skipped", job.id, job.agent_id, {"blocked_by": blocked_by}, logger=logger)
            outcome.errors.append(message)
            outcome.skipped.append(job.id)
            unsuccessful.add(job.id)
            completed.add(job.id)
        return runnable

    async def run(self, jobs: Sequence[Job]) -> SchedulerOutcome:
        """
        Execute all jobs and report what happened.

        Raises:
            GraphConstructionError: If two jobs share an id
        """
        _log = f"[request={self.request_id}] [graph=scheduler] "

        by_id: Dict[str, Job] = {}
        for job in jobs:
            if job.id in by_id:
                raise GraphConstructionError(f"Duplicate job id '{job.id}'")
            by_id[job.id] = job

        outcome = SchedulerOutcome()
        completed: Set[str] = set()
        running: Set[str] = set()
        unsuccessful: Set[str] = set()

        logger.info(f"{_log}Starting | jobs={len(by_id)}, policy={self.failure_policy.value}")

        while len(completed) < len(by_id):
            ready = [
                job
                for job in by_id.values()
                if job.id not in completed
                and job.id not in running
                and job.dependencies <= completed
            ]

            if not ready and not running:
                remaining = sorted(set(by_id) - completed)
                outcome.deadlocked = remaining
                logger.error(f"{_log}Deadlock detected | jobs never became ready: {remaining}")
                break

            if self.failure_policy == FailurePolicy.SKIP_DEPENDENTS:
                ready = self._skip_blocked(ready, unsuccessful, completed, outcome)
                if not ready:
                    continue

            wave = [job.id for job in ready]
            outcome.waves.append(wave)
            running.update(wave)
            logger.info(f"{_log}Launching wave {len(outcome.waves)} | jobs={wave}")

            for job in ready:
                log_job_transition("job_started", job.id, job.agent_id, logger=logger)
                if self.on_job_start is not None:
                    self.on_job_start(job)

            results = await asyncio.gather(
                *(self._run_job(job, outcome) for job in ready),
                return_exceptions=True,
            )

            for job, result in zip(ready, results):
                if isinstance(result, BaseException):
                    message = f"Job {job.id} ({job.agent_id}) failed: {_failure_message(result)}"
                    logger.error(f"{_log}{message}")
                    log_job_transition(
                        "job_failed",
                        job.id,
                        job.agent_id,
                        {"error": _failure_message(result)},
                        logger=logger,
                        level=logging.ERROR,
                    )
                    outcome.errors.append(message)
                    outcome.failed.append(job.id)
                    unsuccessful.add(job.id)
                else:
                    log_job_transition("job_succeeded", job.id, job.agent_id, logger=logger)
                    outcome.succeeded.append(job.id)
                completed.add(job.id)

            running.clear()

        logger.info(
            f"{_log}Finished | waves={len(outcome.waves)}, succeeded={len(outcome.succeeded)}, "
            f"failed={len(outcome.failed)}, skipped={len(outcome.skipped)}, "
            f"deadlocked={len(outcome.deadlocked)}"
        )
        return outcome
