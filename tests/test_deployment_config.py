from __future__ import annotations

import unittest

from _testutil import ensure_repo_on_path

ensure_repo_on_path()

from lambdadeploy.infra.config import (  # noqa: E402
    DEFAULTS,
    load_deployment_settings,
    load_runtime_settings,
    resolve_deployment_config,
)
from lambdadeploy.infra.errors import ConfigValidationError  # noqa: E402
from lambdadeploy.infra.models import DeploymentKind  # noqa: E402


class TestResolveDeploymentConfig(unittest.TestCase):
    def test_action_configuration_has_highest_precedence(self) -> None:
        config = resolve_deployment_config(
            {"deploymentType": "static-artifact"},
            {"DEPLOYMENT_TYPE": "container-service"},
            defaults={"deploymentType": "function-update"},
        )
        self.assertEqual(config["deploymentType"], "static-artifact")
        self.assertEqual(config.deployment_type, DeploymentKind.STATIC_ARTIFACT)

    def test_environment_overrides_defaults(self) -> None:
        config = resolve_deployment_config(
            {},
            {"DEPLOYMENT_TYPE": "container-service", "SERVICE_NAME": "web", "AWS_REGION": "eu-west-1"},
        )
        self.assertEqual(config.deployment_type, DeploymentKind.CONTAINER_SERVICE)
        self.assertEqual(config["serviceName"], "web")
        self.assertEqual(config.region, "eu-west-1")
        # Untouched defaults survive.
        self.assertEqual(config["targetFunction"], DEFAULTS["targetFunction"])
        self.assertEqual(config["clusterName"], "default")

    def test_empty_environment_values_do_not_override(self) -> None:
        config = resolve_deployment_config({}, {"DEPLOYMENT_TYPE": "  ", "ENVIRONMENT": ""})
        self.assertEqual(config.deployment_type, DeploymentKind.FUNCTION_UPDATE)
        self.assertEqual(config.environment, "development")

    def test_unknown_keys_pass_through(self) -> None:
        config = resolve_deployment_config({"customFlag": " yes ", "bucketName": "site"}, {})
        self.assertEqual(config["customFlag"], "yes")
        self.assertEqual(config["bucketName"], "site")

    def test_config_is_read_only(self) -> None:
        config = resolve_deployment_config({}, {})
        with self.assertRaises(TypeError):
            config["deploymentType"] = "static-artifact"  # type: ignore[index]

    def test_unknown_deployment_type_rejected(self) -> None:
        with self.assertRaises(ConfigValidationError) as ctx:
            resolve_deployment_config({"deploymentType": "carrier-pigeon"}, {})
        self.assertIn("carrier-pigeon", str(ctx.exception))

    def test_missing_deployment_type_rejected(self) -> None:
        with self.assertRaises(ConfigValidationError):
            resolve_deployment_config({}, {}, defaults={"region": "us-east-1"})


class TestRuntimeSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        s = load_runtime_settings({})
        self.assertEqual(s.region, "us-east-1")
        self.assertEqual(s.max_attempts, 3)
        self.assertEqual(s.artifact_fetch_workers, 4)
        self.assertFalse(s.email_notifications)
        self.assertEqual(s.log_level, "INFO")

    def test_region_falls_back_to_default_region(self) -> None:
        s = load_runtime_settings({"AWS_DEFAULT_REGION": "ap-south-1"})
        self.assertEqual(s.region, "ap-south-1")

    def test_invalid_integer_rejected(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_runtime_settings({"AWS_MAX_ATTEMPTS": "many"})
        with self.assertRaises(ConfigValidationError):
            load_runtime_settings({"ARTIFACT_FETCH_WORKERS": "0"})

    def test_email_requires_address(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_runtime_settings({"ENABLE_EMAIL_NOTIFICATIONS": "true"})
        s = load_runtime_settings({"ENABLE_EMAIL_NOTIFICATIONS": "true", "NOTIFICATION_EMAIL": "ops@example.com"})
        self.assertTrue(s.email_notifications)


class TestDeploymentSettings(unittest.TestCase):
    def test_notification_settings_ignored(self) -> None:
        s = load_deployment_settings({"ENABLE_EMAIL_NOTIFICATIONS": "true", "SLACK_WEBHOOK_URL": "https://x"})
        self.assertFalse(s.email_notifications)
        self.assertEqual(s.slack_webhook_url, "")

    def test_invalid_integers_fall_back_to_defaults(self) -> None:
        with self.assertLogs("lambdadeploy.infra.config", level="WARNING"):
            s = load_deployment_settings({"AWS_MAX_ATTEMPTS": "many", "ARTIFACT_FETCH_WORKERS": "-2"})
        self.assertEqual((s.max_attempts, s.artifact_fetch_workers), (3, 4))

    def test_valid_values_used(self) -> None:
        s = load_deployment_settings({"AWS_REGION": "ap-south-1", "AWS_MAX_ATTEMPTS": "6", "LOG_LEVEL": "debug"})
        self.assertEqual((s.region, s.max_attempts, s.log_level), ("ap-south-1", 6, "DEBUG"))


if __name__ == "__main__":
    unittest.main()
