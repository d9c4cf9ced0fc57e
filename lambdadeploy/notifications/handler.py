from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import jsonschema
import requests

from ..infra.config import RuntimeSettings
from ..infra.contracts import MailSender, PipelineReader
from ..infra.errors import NotificationError
from ..utils.time import utcnow
from .messages import build_error_message, build_slack_message, email_subject


logger = logging.getLogger(__name__)


SLACK_TIMEOUT_SECONDS = 10

STATE_CHANGE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["detail"],
    "properties": {
        "detail": {
            "type": "object",
            "required": ["pipeline", "execution-id", "state"],
            "properties": {
                "pipeline": {"type": "string", "minLength": 1},
                "execution-id": {"type": "string", "minLength": 1},
                "state": {"type": "string", "minLength": 1},
            },
        },
    },
}


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


class NotificationHandler:
    """Turn a pipeline execution state-change event into Slack and e-mail notifications."""

    def __init__(
        self,
        *,
        pipelines: PipelineReader,
        settings: RuntimeSettings,
        http: Optional[requests.Session] = None,
        mailer: Optional[MailSender] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.pipelines = pipelines
        self.settings = settings
        self.http = http or requests.Session()
        self.mailer = mailer
        self.clock = clock

    def handle(self, event: Any) -> Dict[str, Any]:
        try:
            try:
                jsonschema.validate(instance=event, schema=STATE_CHANGE_SCHEMA)
            except jsonschema.ValidationError as e:
                raise NotificationError(f"invalid pipeline state-change event: {e.message}") from e

            detail = event["detail"]
            pipeline_name = detail["pipeline"]
            execution_id = detail["execution-id"]
            state = detail["state"]

            execution = self.pipelines.get_pipeline_execution(pipeline_name, execution_id)
            message = build_slack_message(pipeline_name, state, execution, self.clock())

            if self.settings.slack_webhook_url:
                self.post_slack(message)
            if self.settings.email_notifications:
                self.send_email(message)
        except Exception as e:
            logger.error("[notify] processing failed: %s", e)
            self.send_error_notification(e)
            return _response(500, {"error": "Failed to process notification", "details": str(e)})

        return _response(
            200,
            {
                "message": "Notification sent successfully",
                "pipelineName": pipeline_name,
                "state": state,
                "executionId": execution_id,
            },
        )

    def post_slack(self, message: Dict[str, Any]) -> None:
        try:
            resp = self.http.post(self.settings.slack_webhook_url, json=message, timeout=SLACK_TIMEOUT_SECONDS)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"Slack notification failed ({e})") from e
        logger.info("[notify] slack notification sent status=%s", resp.status_code)

    def send_email(self, message: Dict[str, Any]) -> None:
        if self.mailer is None:
            raise NotificationError("e-mail notifications enabled but no mail sender is configured")
        address = self.settings.notification_email
        self.mailer.send_text(
            sender=address,
            recipients=[address],
            subject=email_subject(message),
            body=json.dumps(message, indent=2, ensure_ascii=False),
        )
        logger.info("[notify] email notification sent to=%s", address)

    def send_error_notification(self, error: BaseException) -> None:
        """Best effort: report the handler's own failure to Slack."""
        if not self.settings.slack_webhook_url:
            return
        try:
            self.http.post(
                self.settings.slack_webhook_url,
                json=build_error_message(error, self.clock()),
                timeout=SLACK_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error("[notify] failed to send error notification to Slack: %s", e)
