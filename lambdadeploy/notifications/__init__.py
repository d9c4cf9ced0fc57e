from __future__ import annotations

from .handler import NotificationHandler
from .messages import build_error_message, build_slack_message

__all__ = [
    "NotificationHandler",
    "build_error_message",
    "build_slack_message",
]
