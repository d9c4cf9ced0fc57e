from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigValidationError
from .models import DEPLOYMENT_KIND_VALUES, DeploymentConfig, DeploymentKind, parse_deployment_kind


logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, str] = {
    "deploymentType": DeploymentKind.FUNCTION_UPDATE.value,
    "targetFunction": "lambdadeploy-app",
    "environment": "development",
    "region": "us-east-1",
    "clusterName": "default",
    "deploymentPrefix": "deployments",
    "functionUpdateTimeoutSeconds": "300",
}


# Environment variable -> deployment config key. Only non-empty values override.
ENVIRONMENT_KEYS: Tuple[Tuple[str, str], ...] = (
    ("DEPLOYMENT_TYPE", "deploymentType"),
    ("TARGET_FUNCTION_NAME", "targetFunction"),
    ("ENVIRONMENT", "environment"),
    ("AWS_REGION", "region"),
    ("CLUSTER_NAME", "clusterName"),
    ("SERVICE_NAME", "serviceName"),
    ("DEPLOYMENT_BUCKET", "bucketName"),
    ("DEPLOYMENT_PREFIX", "deploymentPrefix"),
    ("FUNCTION_UPDATE_TIMEOUT_SECONDS", "functionUpdateTimeoutSeconds"),
)


def environment_layer(environment: Mapping[str, str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for env_name, key in ENVIRONMENT_KEYS:
        v = str(environment.get(env_name, "") or "").strip()
        if v:
            out[key] = v
    return out


def _normalize(layer: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in (layer or {}).items():
        key = str(k or "").strip()
        if not key:
            continue
        out[key] = "" if v is None else str(v).strip()
    return out


def resolve_deployment_config(
    action_config: Optional[Mapping[str, Any]],
    environment: Optional[Mapping[str, str]] = None,
    defaults: Optional[Mapping[str, str]] = None,
) -> DeploymentConfig:
    """Overlay defaults < environment < job action configuration.

    Keys are overridden one by one; keys unknown to this module pass through so
    backends can read their own settings.

    Raises:
        ConfigValidationError: if deploymentType is empty or not a known kind.
    """
    env = os.environ if environment is None else environment

    merged: Dict[str, str] = {}
    merged.update(_normalize(DEFAULTS if defaults is None else defaults))
    merged.update(environment_layer(env))
    merged.update(_normalize(action_config))

    raw_type = merged.get("deploymentType", "")
    if not raw_type:
        raise ConfigValidationError(
            f"deploymentType is required (allowed={list(DEPLOYMENT_KIND_VALUES)})"
        )
    if parse_deployment_kind(raw_type) is None:
        raise ConfigValidationError(
            f"unsupported deploymentType={raw_type!r} allowed={list(DEPLOYMENT_KIND_VALUES)}"
        )

    return DeploymentConfig(merged)


def _int_env(environment: Mapping[str, str], name: str, default: int, minimum: int = 1) -> int:
    raw = str(environment.get(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigValidationError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigValidationError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class RuntimeSettings:
    """Process settings for the handlers and the CLI.

    Environment:
      - AWS_REGION then AWS_DEFAULT_REGION (default us-east-1)
      - AWS_MAX_ATTEMPTS: botocore standard-mode retry attempts (default 3)
      - ARTIFACT_FETCH_WORKERS: concurrent artifact downloads (default 4)
      - SLACK_WEBHOOK_URL
      - ENABLE_EMAIL_NOTIFICATIONS ("true" enables) and NOTIFICATION_EMAIL
      - LOG_LEVEL (default INFO)
    """

    region: str = "us-east-1"
    max_attempts: int = 3
    artifact_fetch_workers: int = 4
    slack_webhook_url: str = ""
    email_notifications: bool = False
    notification_email: str = ""
    log_level: str = "INFO"


def _region(env: Mapping[str, str]) -> str:
    return str(env.get("AWS_REGION", "") or env.get("AWS_DEFAULT_REGION", "") or "").strip() or "us-east-1"


def _log_level(env: Mapping[str, str]) -> str:
    return str(env.get("LOG_LEVEL", "") or "").strip().upper() or "INFO"


def load_runtime_settings(environment: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    env = os.environ if environment is None else environment

    email_enabled = str(env.get("ENABLE_EMAIL_NOTIFICATIONS", "") or "").strip().lower() == "true"
    notification_email = str(env.get("NOTIFICATION_EMAIL", "") or "").strip()
    if email_enabled and not notification_email:
        raise ConfigValidationError("ENABLE_EMAIL_NOTIFICATIONS=true requires NOTIFICATION_EMAIL")

    return RuntimeSettings(
        region=_region(env),
        max_attempts=_int_env(env, "AWS_MAX_ATTEMPTS", 3),
        artifact_fetch_workers=_int_env(env, "ARTIFACT_FETCH_WORKERS", 4),
        slack_webhook_url=str(env.get("SLACK_WEBHOOK_URL", "") or "").strip(),
        email_notifications=email_enabled,
        notification_email=notification_email,
        log_level=_log_level(env),
    )


def _int_env_or_default(environment: Mapping[str, str], name: str, default: int) -> int:
    try:
        return _int_env(environment, name, default)
    except ConfigValidationError as e:
        logger.warning("[config][WARN] %s; using default %d", e, default)
        return default


def load_deployment_settings(environment: Optional[Mapping[str, str]] = None) -> RuntimeSettings:
    """Settings for the deployment orchestrator. Never raises.

    Notification settings are not read, and an invalid numeric value falls back
    to its default, so a bad process setting cannot stop a job from being
    reported.
    """
    env = os.environ if environment is None else environment
    return RuntimeSettings(
        region=_region(env),
        max_attempts=_int_env_or_default(env, "AWS_MAX_ATTEMPTS", 3),
        artifact_fetch_workers=_int_env_or_default(env, "ARTIFACT_FETCH_WORKERS", 4),
        log_level=_log_level(env),
    )
