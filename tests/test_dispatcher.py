from __future__ import annotations

import unittest

from _testutil import (
    FakeContainerService,
    FakeFunctionService,
    FakeObjectStore,
    ensure_repo_on_path,
    fixed_clock,
    payload,
)

ensure_repo_on_path()

from lambdadeploy.deployment.backends import ContainerServiceBackend, FunctionUpdateBackend  # noqa: E402
from lambdadeploy.deployment.dispatcher import BackendDispatcher, build_dispatcher  # noqa: E402
from lambdadeploy.infra.errors import UnsupportedBackendError  # noqa: E402
from lambdadeploy.infra.models import DeploymentConfig, DeploymentKind  # noqa: E402


class TestBackendDispatcher(unittest.TestCase):
    def setUp(self) -> None:
        self.store = FakeObjectStore()
        self.functions = FakeFunctionService()
        self.containers = FakeContainerService()
        self.dispatcher = build_dispatcher(
            object_store=self.store, functions=self.functions, containers=self.containers, clock=fixed_clock
        )
        self.artifacts = {"BuildArtifact": payload("BuildArtifact")}

    def test_registry_covers_every_kind(self) -> None:
        self.assertEqual(set(self.dispatcher.kinds), set(DeploymentKind))

    def test_routes_function_update(self) -> None:
        cfg = DeploymentConfig({"deploymentType": "function-update", "targetFunction": "fn-1", "environment": "production"})
        result = self.dispatcher.dispatch(cfg, self.artifacts)
        self.assertEqual(result.kind, DeploymentKind.FUNCTION_UPDATE)
        self.assertEqual(self.functions.names(), ["update_code", "wait_until_updated"])
        self.assertEqual(self.containers.calls, [])
        self.assertEqual(self.store.put_calls, [])

    def test_routes_container_service(self) -> None:
        cfg = DeploymentConfig({"deploymentType": "container-service", "serviceName": "web", "clusterName": "c1"})
        result = self.dispatcher.dispatch(cfg, {})
        self.assertEqual(result.kind, DeploymentKind.CONTAINER_SERVICE)
        self.assertEqual(self.containers.calls, [("c1", "web")])
        self.assertEqual(self.functions.calls, [])

    def test_routes_static_artifact(self) -> None:
        cfg = DeploymentConfig({"deploymentType": "static-artifact", "bucketName": "site"})
        result = self.dispatcher.dispatch(cfg, self.artifacts)
        self.assertEqual(result.kind, DeploymentKind.STATIC_ARTIFACT)
        self.assertEqual(len(self.store.put_calls), 1)

    def test_unknown_type_is_unsupported(self) -> None:
        with self.assertRaises(UnsupportedBackendError) as ctx:
            self.dispatcher.dispatch(DeploymentConfig({"deploymentType": "carrier-pigeon"}), self.artifacts)
        self.assertIn("carrier-pigeon", str(ctx.exception))

    def test_unregistered_kind_is_unsupported(self) -> None:
        dispatcher = BackendDispatcher([FunctionUpdateBackend(self.functions)])
        with self.assertRaises(UnsupportedBackendError):
            dispatcher.dispatch(DeploymentConfig({"deploymentType": "container-service", "serviceName": "web"}), {})
        self.assertEqual(self.containers.calls, [])

    def test_duplicate_kind_rejected(self) -> None:
        with self.assertRaises(ValueError):
            BackendDispatcher([ContainerServiceBackend(self.containers), ContainerServiceBackend(self.containers)])


if __name__ == "__main__":
    unittest.main()
