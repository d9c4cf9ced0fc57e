from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union


class DeploymentKind(str, Enum):
    """Closed set of deployment backends. Any other value is a config error."""

    FUNCTION_UPDATE = "function-update"
    CONTAINER_SERVICE = "container-service"
    STATIC_ARTIFACT = "static-artifact"


DEPLOYMENT_KIND_VALUES: Tuple[str, ...] = tuple(k.value for k in DeploymentKind)


def parse_deployment_kind(value: Any) -> Optional[DeploymentKind]:
    v = str(value or "").strip()
    for kind in DeploymentKind:
        if kind.value == v:
            return kind
    return None


class JobState(str, Enum):
    RECEIVED = "RECEIVED"
    CONFIG_RESOLVED = "CONFIG_RESOLVED"
    ARTIFACTS_RESOLVED = "ARTIFACTS_RESOLVED"
    DISPATCHED = "DISPATCHED"
    REPORTED = "REPORTED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ArtifactLocation:
    """Object-store coordinates of an artifact."""

    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass(frozen=True)
class InputArtifactRef:
    name: str
    location: ArtifactLocation


@dataclass(frozen=True)
class OutputArtifactRef:
    name: str
    location: ArtifactLocation


@dataclass(frozen=True)
class ArtifactPayload:
    """A fetched input artifact. Lives only for the duration of one dispatch."""

    name: str
    data: bytes
    location: ArtifactLocation
    content_type: str = ""
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Job:
    """One unit of deployment work handed over by the pipeline.

    Created per invocation from the job event; never persisted.
    """

    job_id: str
    input_artifacts: List[InputArtifactRef] = field(default_factory=list)
    output_artifacts: List[OutputArtifactRef] = field(default_factory=list)
    action_configuration: Dict[str, str] = field(default_factory=dict)


class DeploymentConfig(Mapping):
    """Read-only flat mapping of resolved deployment settings.

    Built once per job by :func:`lambdadeploy.infra.config.resolve_deployment_config`.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, str]):
        self._data = MappingProxyType(dict(data))

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"DeploymentConfig({dict(self._data)!r})"

    def text(self, key: str, default: str = "") -> str:
        return str(self._data.get(key, default) or "").strip()

    @property
    def deployment_type(self) -> Optional[DeploymentKind]:
        return parse_deployment_kind(self._data.get("deploymentType"))

    @property
    def environment(self) -> str:
        return self.text("environment")

    @property
    def region(self) -> str:
        return self.text("region")


@dataclass(frozen=True)
class FunctionUpdateResult:
    function_arn: str
    version: str
    last_modified: str

    kind = DeploymentKind.FUNCTION_UPDATE

    @property
    def deployed_version(self) -> str:
        return self.version or "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "functionArn": self.function_arn,
            "version": self.version,
            "lastModified": self.last_modified,
        }


@dataclass(frozen=True)
class ContainerServiceResult:
    service_arn: str
    task_definition: str

    kind = DeploymentKind.CONTAINER_SERVICE

    @property
    def deployed_version(self) -> str:
        # Task definition ARNs end in ":<revision>"; the full ARN is the version.
        return self.task_definition or "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "serviceArn": self.service_arn,
            "taskDefinition": self.task_definition,
        }


@dataclass(frozen=True)
class StaticArtifactResult:
    location: str
    etag: str
    key: str
    url: str = ""

    kind = DeploymentKind.STATIC_ARTIFACT

    @property
    def deployed_version(self) -> str:
        return self.key or "unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "location": self.location,
            "etag": self.etag,
            "key": self.key,
            "url": self.url,
        }


DeploymentResult = Union[FunctionUpdateResult, ContainerServiceResult, StaticArtifactResult]


@dataclass(frozen=True)
class JobSuccess:
    job_id: str
    result: DeploymentResult
    output_variables: Dict[str, str]
    states: Tuple[JobState, ...] = ()

    succeeded = True


@dataclass(frozen=True)
class JobFailure:
    job_id: str
    message: str
    error_type: str = ""
    states: Tuple[JobState, ...] = ()

    succeeded = False


JobOutcome = Union[JobSuccess, JobFailure]
