"""The closed set of deployment backends.

Each backend implements :class:`lambdadeploy.infra.contracts.DeploymentBackend`
for exactly one :class:`DeploymentKind` and can be exercised on its own with
fake services.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Mapping, Tuple

from ..infra.contracts import ContainerService, DeploymentBackend, FunctionService, ObjectStore
from ..infra.errors import (
    BackendInvocationError,
    ConfigValidationError,
    MissingArtifactError,
)
from ..infra.models import (
    ArtifactLocation,
    ArtifactPayload,
    ContainerServiceResult,
    DeploymentConfig,
    DeploymentKind,
    FunctionUpdateResult,
    StaticArtifactResult,
)
from ..utils.time import compact, iso, utcnow


logger = logging.getLogger(__name__)


# Preference order for the artifact that carries the deployable package.
APPLICATION_ARTIFACT_NAMES: Tuple[str, ...] = ("BuildArtifact", "SourceOutput")

PRODUCTION_ENVIRONMENT = "production"


def select_application_artifact(artifacts: Mapping[str, ArtifactPayload], kind: DeploymentKind) -> ArtifactPayload:
    for name in APPLICATION_ARTIFACT_NAMES:
        payload = artifacts.get(name)
        if payload is not None:
            return payload
    raise MissingArtifactError(
        f"no application artifact found for {kind.value} deployment "
        f"(expected one of {list(APPLICATION_ARTIFACT_NAMES)}, got {sorted(artifacts)})"
    )


def _required(config: DeploymentConfig, key: str, kind: DeploymentKind) -> str:
    v = config.text(key)
    if not v:
        raise ConfigValidationError(f"{kind.value} deployment requires {key!r}")
    return v


class FunctionUpdateBackend(DeploymentBackend):
    """Push a new code package to a Lambda function.

    The code update and the wait for it to apply decide the outcome. Outside
    production the function's environment is then stamped with the deployment
    time; that step is best effort and only logs a warning on failure.
    """

    kind = DeploymentKind.FUNCTION_UPDATE

    def __init__(self, functions: FunctionService, *, clock: Callable[[], datetime] = utcnow):
        self.functions = functions
        self.clock = clock

    def _timeout_seconds(self, config: DeploymentConfig) -> int:
        raw = config.text("functionUpdateTimeoutSeconds", "300")
        try:
            value = int(raw)
        except ValueError:
            raise ConfigValidationError(f"functionUpdateTimeoutSeconds must be an integer, got {raw!r}")
        if value <= 0:
            raise ConfigValidationError(f"functionUpdateTimeoutSeconds must be positive, got {value}")
        return value

    def deploy(self, config: DeploymentConfig, artifacts: Mapping[str, ArtifactPayload]) -> FunctionUpdateResult:
        function_name = _required(config, "targetFunction", self.kind)
        timeout = self._timeout_seconds(config)
        app = select_application_artifact(artifacts, self.kind)

        logger.info("[function_update] updating function=%s artifact=%s bytes=%d", function_name, app.name, app.size_bytes)
        resp = self.functions.update_code(function_name, app.data)
        result = FunctionUpdateResult(
            function_arn=str(resp.get("FunctionArn", "") or ""),
            version=str(resp.get("Version", "") or ""),
            last_modified=str(resp.get("LastModified", "") or ""),
        )
        logger.info("[function_update] code updated arn=%s version=%s", result.function_arn, result.version)

        self.functions.wait_until_updated(function_name, timeout)

        environment = config.environment
        if environment != PRODUCTION_ENVIRONMENT:
            variables = {
                "NODE_ENV": environment,
                "DEPLOYMENT_ENVIRONMENT": environment,
                "DEPLOYMENT_TIME": iso(self.clock()),
            }
            try:
                self.functions.update_environment(function_name, variables)
            except Exception as e:
                logger.warning("[function_update][WARN] environment update failed for function=%s: %s", function_name, e)

        return result


class ContainerServiceBackend(DeploymentBackend):
    """Force a new rollout of an ECS service's current task definition."""

    kind = DeploymentKind.CONTAINER_SERVICE

    def __init__(self, containers: ContainerService):
        self.containers = containers

    def deploy(self, config: DeploymentConfig, artifacts: Mapping[str, ArtifactPayload]) -> ContainerServiceResult:
        service = _required(config, "serviceName", self.kind)
        cluster = config.text("clusterName") or "default"

        logger.info("[container_service] forcing new deployment cluster=%s service=%s", cluster, service)
        try:
            svc = self.containers.force_new_deployment(cluster, service)
        except BackendInvocationError:
            raise
        except Exception as e:
            raise BackendInvocationError(f"service update failed: cluster={cluster} service={service} ({e})") from e

        return ContainerServiceResult(
            service_arn=str(svc.get("serviceArn", "") or ""),
            task_definition=str(svc.get("taskDefinition", "") or ""),
        )


def _random_token() -> str:
    return uuid.uuid4().hex[:12]


class StaticArtifactBackend(DeploymentBackend):
    """Publish the application artifact under a fresh, never-reused key.

    Keys look like ``<prefix>/<timestamp>-<token>/app.zip``. The random token
    keeps keys distinct even for jobs submitted in the same millisecond.
    """

    kind = DeploymentKind.STATIC_ARTIFACT

    def __init__(
        self,
        store: ObjectStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        token_factory: Callable[[], str] = _random_token,
    ):
        self.store = store
        self.clock = clock
        self.token_factory = token_factory

    def object_key(self, config: DeploymentConfig) -> str:
        prefix = config.text("deploymentPrefix", "deployments").strip("/") or "deployments"
        return f"{prefix}/{compact(self.clock())}-{self.token_factory()}/app.zip"

    def deploy(self, config: DeploymentConfig, artifacts: Mapping[str, ArtifactPayload]) -> StaticArtifactResult:
        bucket = _required(config, "bucketName", self.kind)
        app = select_application_artifact(artifacts, self.kind)
        location = ArtifactLocation(bucket=bucket, key=self.object_key(config))

        logger.info("[static_artifact] publishing artifact=%s to %s", app.name, location.uri)
        try:
            put = self.store.put_object(location, app.data, content_type="application/zip")
        except Exception as e:
            raise BackendInvocationError(f"static artifact publish failed: {location.uri} ({e})") from e

        return StaticArtifactResult(
            location=str(put.get("uri", "") or location.uri),
            etag=str(put.get("etag", "") or ""),
            key=location.key,
            url=str(put.get("url", "") or ""),
        )
