from __future__ import annotations


class DeployError(Exception):
    """Base class for deployment job errors."""


class InvalidJobEventError(DeployError):
    """Raised when an event is not a pipeline job event (no job id to report against)."""


class ConfigValidationError(DeployError):
    """Raised when the resolved deployment config is missing or has invalid keys."""


class ArtifactFetchError(DeployError):
    """Raised when an input artifact cannot be fetched from the object store."""


class MissingArtifactError(DeployError):
    """Raised when a backend needs an application artifact the job did not supply."""


class UnsupportedBackendError(DeployError):
    """Raised when no backend is registered for the requested deployment kind."""


class BackendInvocationError(DeployError):
    """Raised when a deployment backend call fails."""


class BackendTimeoutError(BackendInvocationError):
    """Raised when a backend does not reach its target state in time."""


class ObjectStoreError(DeployError):
    """Raised when an object-store write fails."""


class OutputArtifactWriteError(DeployError):
    """Raised when a deployment summary cannot be written to an output artifact."""


class ReportingError(DeployError):
    """Raised when the job result cannot be signalled back to the pipeline.

    This error is never reported through the pipeline itself.
    """


class NotificationError(DeployError):
    """Raised when a pipeline notification cannot be built or delivered."""
