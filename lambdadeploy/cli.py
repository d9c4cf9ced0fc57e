from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any, Dict, List

from .deployment.events import parse_job_event
from .deployment.orchestrator import build_orchestrator
from .infra.config import (
    environment_layer,
    load_deployment_settings,
    load_runtime_settings,
    resolve_deployment_config,
)
from .infra.errors import DeployError
from .infra.factory import AwsClients, build_deployment_infra, build_notification_infra
from .notifications.handler import NotificationHandler
from .utils.logs import configure_logging
from .utils.yamlio import read_yaml


def _load_event(path: str) -> Any:
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise SystemExit(f"event file not found: {p}")
    return read_yaml(p)


def cmd_run_job(args: argparse.Namespace) -> int:
    settings = load_deployment_settings()
    configure_logging(settings.log_level)
    event = _load_event(args.event)

    infra = build_deployment_infra(AwsClients(settings))
    outcome = build_orchestrator(infra, settings, environment=os.environ).handle_event(event)
    if outcome.succeeded:
        print(json.dumps({"jobId": outcome.job_id, "status": "SUCCESS", "result": outcome.result.to_dict(), "outputVariables": outcome.output_variables}, indent=2))
        return 0
    print(json.dumps({"jobId": outcome.job_id, "status": "FAILED", "error": outcome.message}, indent=2))
    return 1


def cmd_notify(args: argparse.Namespace) -> int:
    settings = load_runtime_settings()
    configure_logging(settings.log_level)
    event = _load_event(args.event)

    infra = build_notification_infra(AwsClients(settings))
    resp = NotificationHandler(pipelines=infra.pipelines, settings=settings, mailer=infra.mailer).handle(event)
    print(json.dumps(resp, indent=2))
    return 0 if resp.get("statusCode") == 200 else 1


def cmd_show_config(args: argparse.Namespace) -> int:
    action: Dict[str, Any] = {}
    if args.event:
        action = parse_job_event(_load_event(args.event)).action_configuration
    try:
        config = resolve_deployment_config(action, os.environ)
    except DeployError as e:
        print(json.dumps({"error": str(e)}, indent=2))
        return 2
    print(json.dumps(dict(config), indent=2, sort_keys=True))
    return 0


def cmd_validate_config(args: argparse.Namespace) -> int:
    errors: List[str] = []
    warnings: List[str] = []
    report: Dict[str, Any] = {"environment": environment_layer(os.environ)}

    try:
        settings = load_runtime_settings()
        report["region"] = settings.region
    except DeployError as e:
        errors.append(str(e))
        settings = None

    try:
        report["config"] = dict(resolve_deployment_config({}, os.environ))
    except DeployError as e:
        errors.append(str(e))

    if settings is not None and not args.skip_aws:
        try:
            identity = AwsClients(settings).client("sts").get_caller_identity()
            report["aws"] = {"account": identity.get("Account", ""), "arn": identity.get("Arn", "")}
            expected = str(os.environ.get("AWS_ACCOUNT_ID", "") or "").strip()
            if expected and expected != identity.get("Account"):
                warnings.append(f"AWS account mismatch: AWS_ACCOUNT_ID={expected} caller={identity.get('Account')}")
        except Exception as e:
            errors.append(f"AWS credentials check failed: {e}")

    report["errors"] = errors
    report["warnings"] = warnings
    print(json.dumps(report, indent=2, sort_keys=True))
    return 1 if errors else 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lambdadeploy")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("run-job", help="Run the deployment orchestrator for a CodePipeline job event")
    sp.add_argument("--event", required=True, help="Path to a JSON or YAML job event")
    sp.set_defaults(func=cmd_run_job)

    sp = sub.add_parser("notify", help="Run the notification handler for a pipeline state-change event")
    sp.add_argument("--event", required=True)
    sp.set_defaults(func=cmd_notify)

    sp = sub.add_parser("show-config", help="Print the resolved deployment config (no AWS calls)")
    sp.add_argument("--event", default="", help="Optional job event supplying action configuration")
    sp.set_defaults(func=cmd_show_config)

    sp = sub.add_parser("validate-config", help="Check environment configuration and AWS credentials")
    sp.add_argument("--skip-aws", action="store_true", help="Do not call STS")
    sp.set_defaults(func=cmd_validate_config)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
