"""AWS Lambda entry points.

Clients are built per invocation and passed down explicitly; nothing is cached
at module level.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

from .deployment.events import summarize_job_event
from .deployment.orchestrator import build_orchestrator
from .infra.config import load_deployment_settings, load_runtime_settings
from .infra.factory import AwsClients, build_deployment_infra, build_notification_infra
from .notifications.handler import NotificationHandler
from .utils.logs import configure_logging


logger = logging.getLogger(__name__)


def deployment_orchestrator_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """Handle one ``CodePipeline.job`` invocation.

    A job failure is reported to the pipeline and answered with status 500; it
    is not re-raised, so an invocation retry cannot report the job twice. An
    event without a job id, or a failed report, raises. Settings are read with
    :func:`load_deployment_settings`, which never raises, so process settings
    cannot keep a job from being reported.
    """
    settings = load_deployment_settings()
    configure_logging(settings.log_level)
    logger.info("[handler] deployment orchestrator triggered: %s", json.dumps(summarize_job_event(event), default=str))

    infra = build_deployment_infra(AwsClients(settings))
    orchestrator = build_orchestrator(infra, settings, environment=os.environ)
    outcome = orchestrator.handle_event(event)

    if outcome.succeeded:
        return {
            "statusCode": 200,
            "body": json.dumps(
                {
                    "message": "Deployment orchestrated successfully",
                    "jobId": outcome.job_id,
                    "result": outcome.result.to_dict(),
                }
            ),
        }
    return {
        "statusCode": 500,
        "body": json.dumps(
            {
                "message": "Deployment failed",
                "jobId": outcome.job_id,
                "error": outcome.message,
            }
        ),
    }


def notification_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    settings = load_runtime_settings()
    configure_logging(settings.log_level)
    logger.info("[handler] notification handler triggered: %s", json.dumps(event, default=str))

    infra = build_notification_infra(AwsClients(settings))
    handler = NotificationHandler(pipelines=infra.pipelines, settings=settings, mailer=infra.mailer)
    return handler.handle(event)
