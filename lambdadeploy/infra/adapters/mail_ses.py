from __future__ import annotations

from typing import Any, Dict

from ..contracts import MailSender
from ..errors import NotificationError


class SesMailSender(MailSender):
    """Plain-text e-mail through an injected boto3 SES client."""

    def __init__(self, client: Any):
        self.client = client

    def describe(self) -> Dict[str, Any]:
        return {"class": self.__class__.__name__, "service": "ses"}

    def send_text(self, *, sender: str, recipients: list[str], subject: str, body: str) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self.client.send_email(
                Source=sender,
                Destination={"ToAddresses": list(recipients)},
                Message={
                    "Subject": {"Data": subject},
                    "Body": {"Text": {"Data": body}},
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise NotificationError(f"SES send_email failed ({e})") from e
