from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..infra.config import RuntimeSettings, resolve_deployment_config
from ..infra.errors import ReportingError
from ..infra.factory import DeploymentInfra
from ..infra.models import DeploymentResult, Job, JobFailure, JobOutcome, JobState, JobSuccess
from ..utils.time import iso, utcnow
from .artifacts import ArtifactResolver
from .dispatcher import BackendDispatcher, build_dispatcher
from .events import extract_job_id, parse_job_event
from .reporter import JobResultReporter


logger = logging.getLogger(__name__)


def failure_message(error: BaseException) -> str:
    text = str(error).strip()
    return text or error.__class__.__name__


def success_variables(result: DeploymentResult, deployed_at: str) -> Dict[str, str]:
    return {
        "deploymentStatus": "SUCCESS",
        "deploymentTime": deployed_at,
        "deployedVersion": result.deployed_version,
    }


class JobOrchestrator:
    """Drive one pipeline job to exactly one terminal report.

    Sequence: config -> artifacts -> dispatch -> output summaries, all inside a
    single failure boundary. Whatever happens inside the boundary ends in one
    report_failure call; a clean run ends in one report_success call. Only
    ReportingError (the pipeline could not be told) escapes to the caller.
    """

    def __init__(
        self,
        *,
        artifacts: ArtifactResolver,
        dispatcher: BackendDispatcher,
        reporter: JobResultReporter,
        environment: Optional[Mapping[str, str]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.artifacts = artifacts
        self.dispatcher = dispatcher
        self.reporter = reporter
        self.environment = environment
        self.clock = clock

    def handle_event(self, event: Any) -> JobOutcome:
        """Run the job described by a ``CodePipeline.job`` event.

        Raises:
            InvalidJobEventError: the event carries no job id, so nothing can be reported.
            ReportingError: the terminal report itself failed.
        """
        job_id = extract_job_id(event)
        return self._run(job_id, lambda: parse_job_event(event))

    def run(self, job: Job) -> JobOutcome:
        return self._run(job.job_id, lambda: job)

    def _run(self, job_id: str, load: Callable[[], Job]) -> JobOutcome:
        states: List[JobState] = [JobState.RECEIVED]
        logger.info("[deploy] job=%s state=%s", job_id, JobState.RECEIVED.value)

        def _advance(state: JobState) -> None:
            states.append(state)
            logger.info("[deploy] job=%s state=%s", job_id, state.value)

        try:
            job = load()
            config = resolve_deployment_config(job.action_configuration, self.environment)
            _advance(JobState.CONFIG_RESOLVED)
            logger.info(
                "[deploy] job=%s deploymentType=%s environment=%s keys=%s",
                job_id,
                config.text("deploymentType"),
                config.environment,
                sorted(config),
            )

            payloads = self.artifacts.resolve(job.input_artifacts)
            _advance(JobState.ARTIFACTS_RESOLVED)

            result = self.dispatcher.dispatch(config, payloads)
            _advance(JobState.DISPATCHED)

            self.reporter.write_summaries(job.output_artifacts, result)
        except ReportingError:
            raise
        except Exception as e:
            message = failure_message(e)
            states.append(JobState.FAILED)
            logger.error("[deploy] job=%s state=%s error=%s: %s", job_id, JobState.FAILED.value, e.__class__.__name__, message)
            self.reporter.report_failure(job_id, message)
            return JobFailure(job_id=job_id, message=message, error_type=e.__class__.__name__, states=tuple(states))

        variables = success_variables(result, iso(self.clock()))
        self.reporter.report_success(job_id, variables)
        _advance(JobState.REPORTED)
        return JobSuccess(job_id=job_id, result=result, output_variables=variables, states=tuple(states))


def build_orchestrator(
    infra: DeploymentInfra,
    settings: RuntimeSettings,
    *,
    environment: Optional[Mapping[str, str]] = None,
    clock: Callable[[], datetime] = utcnow,
) -> JobOrchestrator:
    return JobOrchestrator(
        artifacts=ArtifactResolver(infra.object_store, max_workers=settings.artifact_fetch_workers),
        dispatcher=build_dispatcher(
            object_store=infra.object_store,
            functions=infra.functions,
            containers=infra.containers,
            clock=clock,
        ),
        reporter=JobResultReporter(infra.jobs, infra.object_store, clock=clock),
        environment=os.environ if environment is None else environment,
        clock=clock,
    )
