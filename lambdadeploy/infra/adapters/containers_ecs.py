from __future__ import annotations

from typing import Any, Dict

from ..contracts import ContainerService
from ..errors import BackendInvocationError


class EcsContainerService(ContainerService):
    """ContainerService backed by an injected boto3 ECS client."""

    def __init__(self, client: Any):
        self.client = client

    def describe(self) -> Dict[str, Any]:
        return {"class": self.__class__.__name__, "service": "ecs"}

    def force_new_deployment(self, cluster: str, service: str) -> Dict[str, Any]:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            resp = self.client.update_service(cluster=cluster, service=service, forceNewDeployment=True)
        except (ClientError, BotoCoreError) as e:
            raise BackendInvocationError(f"service update failed: cluster={cluster} service={service} ({e})") from e

        svc = resp.get("service")
        if not isinstance(svc, dict):
            raise BackendInvocationError(f"service update returned no service: cluster={cluster} service={service}")
        return svc
