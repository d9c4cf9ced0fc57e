from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .adapters import (
    CodePipelineJobs,
    EcsContainerService,
    LambdaFunctionService,
    S3ObjectStore,
    SesMailSender,
)
from .config import RuntimeSettings
from .contracts import ContainerService, FunctionService, JobSignaler, MailSender, ObjectStore, PipelineReader


class AwsClients:
    """boto3 clients for one invocation (or one CLI run).

    Clients share a session and a botocore Config with standard-mode retries,
    which gives bounded exponential backoff on throttling and transient faults.
    Nothing here is module-level: each handler call builds its own instance.
    """

    def __init__(self, settings: RuntimeSettings, session: Optional[Any] = None):
        self.settings = settings
        self._session = session
        self._clients: Dict[str, Any] = {}

    def _config(self):
        from botocore.config import Config

        return Config(
            region_name=self.settings.region,
            retries={"max_attempts": self.settings.max_attempts, "mode": "standard"},
        )

    def session(self):
        if self._session is None:
            import boto3

            self._session = boto3.session.Session(region_name=self.settings.region)
        return self._session

    def client(self, service: str) -> Any:
        c = self._clients.get(service)
        if c is None:
            c = self.session().client(service, config=self._config())
            self._clients[service] = c
        return c


@dataclass
class DeploymentInfra:
    object_store: ObjectStore
    functions: FunctionService
    containers: ContainerService
    jobs: JobSignaler

    def describe(self) -> Dict[str, Any]:
        return {
            "object_store": _describe(self.object_store),
            "functions": _describe(self.functions),
            "containers": _describe(self.containers),
            "jobs": _describe(self.jobs),
        }


@dataclass
class NotificationInfra:
    pipelines: PipelineReader
    mailer: Optional[MailSender] = None

    def describe(self) -> Dict[str, Any]:
        return {
            "pipelines": _describe(self.pipelines),
            "mailer": _describe(self.mailer) if self.mailer is not None else {"class": "NotConfigured"},
        }


def _describe(x: Any) -> Dict[str, Any]:
    if hasattr(x, "describe") and callable(getattr(x, "describe")):
        return dict(x.describe())
    return {"class": x.__class__.__name__}


def build_deployment_infra(clients: AwsClients) -> DeploymentInfra:
    return DeploymentInfra(
        object_store=S3ObjectStore(clients.client("s3")),
        functions=LambdaFunctionService(clients.client("lambda")),
        containers=EcsContainerService(clients.client("ecs")),
        jobs=CodePipelineJobs(clients.client("codepipeline")),
    )


def build_notification_infra(clients: AwsClients) -> NotificationInfra:
    mailer: Optional[MailSender] = None
    if clients.settings.email_notifications:
        mailer = SesMailSender(clients.client("ses"))
    return NotificationInfra(pipelines=CodePipelineJobs(clients.client("codepipeline")), mailer=mailer)
