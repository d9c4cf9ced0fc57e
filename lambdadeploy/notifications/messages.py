from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping

from ..utils.time import iso


USERNAME = "LambdaDeploy Pipeline"
CONSOLE_URL = "https://console.aws.amazon.com/codesuite/codepipeline/pipelines/{pipeline}/view"

COLOR_OK = "#36a64f"
COLOR_FAILED = "#ff0000"
COLOR_STARTED = "#ffaa00"


def _style(state: str) -> tuple[str, str]:
    if state == "FAILED":
        return COLOR_FAILED, "❌"
    if state == "STARTED":
        return COLOR_STARTED, "\U0001f680"
    return COLOR_OK, "✅"


def short_id(execution_id: str, width: int = 8) -> str:
    return f"{execution_id[:width]}..." if execution_id else "unknown"


def build_slack_message(pipeline_name: str, state: str, execution: Mapping[str, Any], now: datetime) -> Dict[str, Any]:
    """Slack incoming-webhook payload for a pipeline state change."""
    color, emoji = _style(state)
    execution_id = str(execution.get("pipelineExecutionId", "") or "")
    trigger = execution.get("trigger") or {}

    fields = [
        {"title": "Pipeline", "value": pipeline_name, "short": True},
        {"title": "Status", "value": state, "short": True},
        {"title": "Execution ID", "value": short_id(execution_id), "short": True},
        {"title": "Timestamp", "value": iso(now), "short": True},
    ]
    if trigger.get("triggerType") == "Webhook":
        fields.append(
            {
                "title": "Triggered by",
                "value": f"Git commit: {trigger.get('triggerDetail') or 'Unknown'}",
                "short": False,
            }
        )

    return {
        "username": USERNAME,
        "icon_emoji": ":rocket:",
        "attachments": [
            {
                "color": color,
                "title": f"{emoji} Pipeline {state}",
                "title_link": CONSOLE_URL.format(pipeline=pipeline_name),
                "fields": fields,
                "footer": USERNAME,
                "ts": int(now.timestamp()),
            }
        ],
    }


def build_error_message(error: BaseException, now: datetime) -> Dict[str, Any]:
    return {
        "username": USERNAME,
        "icon_emoji": ":warning:",
        "attachments": [
            {
                "color": COLOR_FAILED,
                "title": "\U0001f6a8 Notification Handler Error",
                "fields": [
                    {"title": "Error", "value": str(error), "short": False},
                    {"title": "Timestamp", "value": iso(now), "short": True},
                ],
                "footer": f"{USERNAME} Error Handler",
            }
        ],
    }


def email_subject(message: Mapping[str, Any]) -> str:
    fields = message["attachments"][0]["fields"]
    status = next((f["value"] for f in fields if f.get("title") == "Status"), "UNKNOWN")
    return f"{USERNAME} Notification - {status}"
