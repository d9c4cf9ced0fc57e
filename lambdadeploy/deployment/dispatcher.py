from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Mapping

from ..infra.contracts import ContainerService, DeploymentBackend, FunctionService, ObjectStore
from ..infra.errors import UnsupportedBackendError
from ..infra.models import ArtifactPayload, DeploymentConfig, DeploymentKind, DeploymentResult
from ..utils.time import utcnow
from .backends import ContainerServiceBackend, FunctionUpdateBackend, StaticArtifactBackend


logger = logging.getLogger(__name__)


class BackendDispatcher:
    """Route a resolved config to the one backend registered for its kind."""

    def __init__(self, backends: Iterable[DeploymentBackend]):
        registry: Dict[DeploymentKind, DeploymentBackend] = {}
        for backend in backends:
            kind = DeploymentKind(backend.kind)
            if kind in registry:
                raise ValueError(f"duplicate backend for kind={kind.value}")
            registry[kind] = backend
        self._backends = registry

    @property
    def kinds(self) -> list[DeploymentKind]:
        return sorted(self._backends, key=lambda k: k.value)

    def dispatch(self, config: DeploymentConfig, artifacts: Mapping[str, ArtifactPayload]) -> DeploymentResult:
        kind = config.deployment_type
        backend = self._backends.get(kind) if kind is not None else None
        if backend is None:
            raise UnsupportedBackendError(f"unsupported deployment type: {config.get('deploymentType')!r}")

        logger.info("[dispatch] deploymentType=%s backend=%s", kind.value, backend.__class__.__name__)
        return backend.deploy(config, artifacts)


def build_dispatcher(
    *,
    object_store: ObjectStore,
    functions: FunctionService,
    containers: ContainerService,
    clock: Callable[[], datetime] = utcnow,
) -> BackendDispatcher:
    return BackendDispatcher(
        [
            FunctionUpdateBackend(functions, clock=clock),
            ContainerServiceBackend(containers),
            StaticArtifactBackend(object_store, clock=clock),
        ]
    )
