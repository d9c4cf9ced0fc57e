from __future__ import annotations

from .models import (
    ArtifactLocation,
    ArtifactPayload,
    ContainerServiceResult,
    DeploymentConfig,
    DeploymentKind,
    DeploymentResult,
    FunctionUpdateResult,
    InputArtifactRef,
    Job,
    JobFailure,
    JobOutcome,
    JobState,
    JobSuccess,
    OutputArtifactRef,
    StaticArtifactResult,
)

from .errors import (
    DeployError,
    InvalidJobEventError,
    ConfigValidationError,
    ArtifactFetchError,
    MissingArtifactError,
    UnsupportedBackendError,
    BackendInvocationError,
    BackendTimeoutError,
    ObjectStoreError,
    OutputArtifactWriteError,
    ReportingError,
    NotificationError,
)

from .contracts import (
    ObjectStore,
    FunctionService,
    ContainerService,
    JobSignaler,
    PipelineReader,
    MailSender,
    DeploymentBackend,
)

from .config import (
    DEFAULTS,
    RuntimeSettings,
    load_deployment_settings,
    load_runtime_settings,
    resolve_deployment_config,
)

from .factory import (
    AwsClients,
    DeploymentInfra,
    NotificationInfra,
    build_deployment_infra,
    build_notification_infra,
)

__all__ = [
    "ArtifactLocation",
    "ArtifactPayload",
    "ContainerServiceResult",
    "DeploymentConfig",
    "DeploymentKind",
    "DeploymentResult",
    "FunctionUpdateResult",
    "InputArtifactRef",
    "Job",
    "JobFailure",
    "JobOutcome",
    "JobState",
    "JobSuccess",
    "OutputArtifactRef",
    "StaticArtifactResult",
    "DeployError",
    "InvalidJobEventError",
    "ConfigValidationError",
    "ArtifactFetchError",
    "MissingArtifactError",
    "UnsupportedBackendError",
    "BackendInvocationError",
    "BackendTimeoutError",
    "ObjectStoreError",
    "OutputArtifactWriteError",
    "ReportingError",
    "NotificationError",
    "ObjectStore",
    "FunctionService",
    "ContainerService",
    "JobSignaler",
    "PipelineReader",
    "MailSender",
    "DeploymentBackend",
    "DEFAULTS",
    "RuntimeSettings",
    "load_deployment_settings",
    "load_runtime_settings",
    "resolve_deployment_config",
    "AwsClients",
    "DeploymentInfra",
    "NotificationInfra",
    "build_deployment_infra",
    "build_notification_infra",
]
