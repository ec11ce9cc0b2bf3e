"""
Assistant orchestrator.

Sequences one planning run:
    analysis -> brain prep -> job graph (wave scheduler) -> final assembly

Agent failures are collected in ``errors`` and never abort the run; only a
malformed job graph propagates.
"""

import logging
import time
import uuid
from dataclasses import asdict
from typing import Dict, Mapping, Optional, Sequence

from assistant.agents import WebContentFetcher, build_default_agents
from assistant.brain.schemas import create_brain
from assistant.brain.store import BrainRepository, BrainSession, InMemoryBrainRepository
from assistant.orchestration.config import DEFAULT_CONFIG, AssistantConfig
from assistant.orchestration.errors import GraphConstructionError
from assistant.orchestration.graph import ASSISTANT_GRAPH, build_assistant_jobs
from assistant.orchestration.progress import ProgressListener, ProgressReporter
from assistant.orchestration.scheduler import WaveScheduler
from assistant.orchestration.schemas import (
    AssistantProcessingResult,
    AssistantRequest,
    Job,
    JobSpec,
)
from assistant.shared.contracts import agent_ids


logger = logging.getLogger(__name__)


class AssistantOrchestrator:
    """
    Runs the planning agents for assistant requests.

    Args:
        agents: Agent instances keyed by agent id; defaults to the full set
            built from ``config``
        repository: Brain persistence for requests carrying a project id
        config: Orchestrator configuration
        graph: Job specs of the dependency graph
    """

    def __init__(
        self,
        agents: Optional[Mapping[str, object]] = None,
        repository: Optional[BrainRepository] = None,
        config: Optional[AssistantConfig] = None,
        graph: Sequence[JobSpec] = ASSISTANT_GRAPH,
    ):
        self.config = config or DEFAULT_CONFIG
        self.agents = dict(
            agents
            or build_default_agents(
                model=self.config.model,
                timeout=self.config.llm_timeout,
                fetcher=WebContentFetcher(timeout=self.config.fetch_timeout),
                max_next_actions=self.config.max_next_actions,
                max_fetch_urls=self.config.max_fetch_urls,
            )
        )
        self.repository = repository or InMemoryBrainRepository()
        self.graph = tuple(graph)
        self._specs_by_id: Dict[str, JobSpec] = {spec.id: spec for spec in self.graph}

    async def process(
        self,
        request: AssistantRequest,
        on_progress: Optional[ProgressListener] = None,
    ) -> AssistantProcessingResult:
        """
        Process one request end to end.

        Raises:
            GraphConstructionError: If the job graph is malformed
        """
        start = time.monotonic()
        request_id = request.request_id
        run_id = f"{request_id}:{uuid.uuid4().hex[:8]}"
        _log = f"[request={request_id}] [graph=assistant] "

        errors = []
        reporter = ProgressReporter(request_id, on_progress)
        analyst_result = None
        final_result = None
        scheduler_summary = None
        session: Optional[BrainSession] = None

        def elapsed_ms() -> int:
            return int((time.monotonic() - start) * 1000)

        logger.info(
            f"{_log}Run starting | run_id={run_id}, project={request.project_id}, "
            f"task_length={len(request.task)}"
        )

        try:
            # Phase 1: analysis
            reporter.report("analysis", "Starting analysis phase...")
            if request.project_id:
                brain = self.repository.load_or_create(
                    request.project_id,
                    request.task,
                    request.context,
                    request.constraints,
                    request.deliverables,
                )
            else:
                brain = create_brain(
                    request.task, request.context, request.constraints, request.deliverables
                )
            session = BrainSession(brain, run_id)

            analyst = self.agents[agent_ids.ANALYST]
            analyst_result = await analyst.analyze(
                request.task, request.context, request.constraints, request.deliverables
            )

            # Phase 2: brain prep
            reporter.report(
                "local-brain-prep", "Preparing local brain...", {"projectId": request.project_id}
            )
            if analyst_result.success:
                await session.apply(analyst_result)
            else:
                errors.append(f"Analysis failed: {analyst_result.error}")
                logger.warning(f"{_log}Analysis failed, continuing with request brain")

            # Phase 3: job graph
            jobs = build_assistant_jobs(session, self.agents, self.graph)
            scheduler = WaveScheduler(
                failure_policy=self.config.failure_policy,
                on_job_start=lambda job: self._report_job_start(reporter, job),
                request_id=request_id,
            )
            outcome = await scheduler.run(jobs)
            errors.extend(outcome.errors)
            if outcome.deadlocked:
                errors.append(
                    f"Deadlock: jobs never became ready: {', '.join(outcome.deadlocked)}"
                )
            scheduler_summary = {
                key: value
                for key, value in asdict(outcome).items()
                if key not in ("started_at", "finished_at", "errors")
            }

            # Phase 4: final assembly
            reporter.report("final-assembly", "Assembling final result...")
            assembler = self.agents[agent_ids.FINAL_ASSEMBLER]
            final_result = await assembler.assemble(session.snapshot(), run_id=run_id)

            if final_result.success:
                reporter.report(
                    "completed",
                    "Processing completed successfully",
                    {"processingTimeMs": elapsed_ms()},
                )
            else:
                errors.append(f"Final assembly failed: {final_result.error}")
                reporter.report(
                    "error",
                    f"Processing failed: {final_result.error}",
                    {"error": final_result.error},
                )

            if request.project_id:
                self.repository.save(request.project_id, session.brain)

        except GraphConstructionError:
            logger.exception(f"{_log}Job graph is malformed")
            raise
        except Exception as e:
            logger.exception(f"{_log}Run failed: {e}")
            errors.append(str(e) or type(e).__name__)
            reporter.report("error", f"Processing failed: {e}", {"error": str(e)})

        if session is not None:
            final_brain = session.snapshot()
        else:
            final_brain = create_brain(request.task)

        logger.info(
            f"{_log}Run finished | success={bool(final_result and final_result.success)}, "
            f"errors={len(errors)}, elapsed_ms={elapsed_ms()}"
        )

        return AssistantProcessingResult(
            request_id=request_id,
            local_brain=final_brain,
            analyst=analyst_result,
            agent_outputs=self._outputs_for_run(final_brain, run_id),
            final_assembler=final_result,
            scheduler=scheduler_summary,
            processing_time_ms=elapsed_ms(),
            errors=errors,
            progress=list(reporter.history),
        )

    def _report_job_start(self, reporter: ProgressReporter, job: Job) -> None:
        spec = self._specs_by_id.get(job.id)
        if spec is not None and spec.stage:
            reporter.report(spec.stage, spec.message or f"Running {job.agent_id}...")

    @staticmethod
    def _outputs_for_run(brain, run_id: str) -> Dict[str, dict]:
        outputs: Dict[str, dict] = {}
        for entry in brain.history:
            if entry.run_id == run_id:
                outputs[entry.agent_id] = entry.output
        return outputs
