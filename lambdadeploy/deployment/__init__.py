from __future__ import annotations

from .artifacts import ArtifactResolver
from .backends import (
    APPLICATION_ARTIFACT_NAMES,
    ContainerServiceBackend,
    FunctionUpdateBackend,
    StaticArtifactBackend,
    select_application_artifact,
)
from .dispatcher import BackendDispatcher, build_dispatcher
from .events import extract_job_id, parse_job_event, summarize_job_event
from .orchestrator import JobOrchestrator, build_orchestrator
from .reporter import JobResultReporter

__all__ = [
    "ArtifactResolver",
    "APPLICATION_ARTIFACT_NAMES",
    "ContainerServiceBackend",
    "FunctionUpdateBackend",
    "StaticArtifactBackend",
    "select_application_artifact",
    "BackendDispatcher",
    "build_dispatcher",
    "extract_job_id",
    "parse_job_event",
    "summarize_job_event",
    "JobOrchestrator",
    "build_orchestrator",
    "JobResultReporter",
]
