from __future__ import annotations

from typing import Any, Dict, Mapping, Protocol

from .models import (
    ArtifactLocation,
    ArtifactPayload,
    DeploymentConfig,
    DeploymentKind,
    DeploymentResult,
)


class ObjectStore(Protocol):
    def get_object(self, name: str, location: ArtifactLocation) -> ArtifactPayload:
        raise NotImplementedError

    def put_object(self, location: ArtifactLocation, body: bytes, content_type: str = "") -> Dict[str, str]:
        """Write an object and return ``{"uri": ..., "url": ..., "etag": ...}``.

        ``uri`` is the ``s3://`` form, ``url`` the object's HTTPS address.
        """
        raise NotImplementedError


class FunctionService(Protocol):
    def update_code(self, function_name: str, zip_file: bytes) -> Dict[str, Any]:
        raise NotImplementedError

    def wait_until_updated(self, function_name: str, timeout_seconds: int) -> None:
        raise NotImplementedError

    def update_environment(self, function_name: str, variables: Dict[str, str]) -> None:
        raise NotImplementedError


class ContainerService(Protocol):
    def force_new_deployment(self, cluster: str, service: str) -> Dict[str, Any]:
        raise NotImplementedError


class JobSignaler(Protocol):
    """The pipeline's job-signalling endpoint."""

    def put_job_success(self, job_id: str, output_variables: Dict[str, str]) -> None:
        raise NotImplementedError

    def put_job_failure(self, job_id: str, message: str, failure_type: str = "JobFailed") -> None:
        raise NotImplementedError


class PipelineReader(Protocol):
    def get_pipeline_execution(self, pipeline_name: str, execution_id: str) -> Dict[str, Any]:
        raise NotImplementedError


class MailSender(Protocol):
    def send_text(self, *, sender: str, recipients: list[str], subject: str, body: str) -> None:
        raise NotImplementedError


class DeploymentBackend(Protocol):
    """One deployment mechanism of the closed backend set."""

    kind: DeploymentKind

    def deploy(self, config: DeploymentConfig, artifacts: Mapping[str, ArtifactPayload]) -> DeploymentResult:
        raise NotImplementedError
