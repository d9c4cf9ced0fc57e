from __future__ import annotations

import json
import unittest

import requests

from _testutil import FIXED_NOW, ensure_repo_on_path, fixed_clock

ensure_repo_on_path()

from lambdadeploy.infra.config import RuntimeSettings  # noqa: E402
from lambdadeploy.infra.errors import NotificationError  # noqa: E402
from lambdadeploy.notifications import NotificationHandler, build_slack_message  # noqa: E402
from lambdadeploy.notifications.messages import COLOR_FAILED, COLOR_OK, COLOR_STARTED, email_subject  # noqa: E402


WEBHOOK = "https://hooks.slack.example/T000/B000"


def state_event(state: str = "SUCCEEDED") -> dict:
    return {
        "source": "aws.codepipeline",
        "detail": {"pipeline": "web-pipeline", "execution-id": "0123456789abcdef", "state": state},
    }


class FakeResponse:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")


class FakeHttp:
    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.posts = []
        self.error = None

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json, timeout))
        if self.error is not None:
            raise self.error
        return FakeResponse(self.status_code)


class FakePipelines:
    def __init__(self, execution=None, error=None):
        self.execution = execution if execution is not None else {"pipelineExecutionId": "0123456789abcdef"}
        self.error = error
        self.calls = []

    def get_pipeline_execution(self, pipeline_name, execution_id):
        self.calls.append((pipeline_name, execution_id))
        if self.error is not None:
            raise self.error
        return dict(self.execution)


class FakeMailer:
    def __init__(self):
        self.sent = []

    def send_text(self, *, sender, recipients, subject, body):
        self.sent.append({"sender": sender, "recipients": list(recipients), "subject": subject, "body": body})


class TestSlackMessage(unittest.TestCase):
    def fields(self, message) -> dict:
        return {f["title"]: f["value"] for f in message["attachments"][0]["fields"]}

    def test_colors_follow_state(self) -> None:
        colors = {
            state: build_slack_message("p", state, {}, FIXED_NOW)["attachments"][0]["color"]
            for state in ("FAILED", "STARTED", "SUCCEEDED")
        }
        self.assertEqual(colors, {"FAILED": COLOR_FAILED, "STARTED": COLOR_STARTED, "SUCCEEDED": COLOR_OK})

    def test_fields(self) -> None:
        message = build_slack_message("web-pipeline", "SUCCEEDED", {"pipelineExecutionId": "0123456789abcdef"}, FIXED_NOW)
        fields = self.fields(message)
        self.assertEqual(fields["Pipeline"], "web-pipeline")
        self.assertEqual(fields["Execution ID"], "01234567...")
        self.assertEqual(fields["Timestamp"], "2024-05-01T12:00:00Z")
        self.assertNotIn("Triggered by", fields)
        self.assertIn("web-pipeline", message["attachments"][0]["title_link"])
        self.assertEqual(email_subject(message), "LambdaDeploy Pipeline Notification - SUCCEEDED")

    def test_webhook_trigger_adds_commit(self) -> None:
        execution = {"pipelineExecutionId": "e", "trigger": {"triggerType": "Webhook", "triggerDetail": "abc123"}}
        fields = self.fields(build_slack_message("p", "STARTED", execution, FIXED_NOW))
        self.assertEqual(fields["Triggered by"], "Git commit: abc123")


class TestNotificationHandler(unittest.TestCase):
    def handler(self, settings: RuntimeSettings, **kwargs) -> NotificationHandler:
        kwargs.setdefault("pipelines", FakePipelines())
        return NotificationHandler(settings=settings, clock=fixed_clock, **kwargs)

    def test_posts_to_slack(self) -> None:
        http = FakeHttp()
        pipelines = FakePipelines()
        resp = self.handler(RuntimeSettings(slack_webhook_url=WEBHOOK), http=http, pipelines=pipelines).handle(
            state_event()
        )

        self.assertEqual(resp["statusCode"], 200)
        body = json.loads(resp["body"])
        self.assertEqual(body["pipelineName"], "web-pipeline")
        self.assertEqual(body["executionId"], "0123456789abcdef")
        self.assertEqual(pipelines.calls, [("web-pipeline", "0123456789abcdef")])
        url, message, timeout = http.posts[0]
        self.assertEqual(url, WEBHOOK)
        self.assertEqual(timeout, 10)
        self.assertEqual(message["attachments"][0]["color"], COLOR_OK)

    def test_no_webhook_no_post(self) -> None:
        http = FakeHttp()
        resp = self.handler(RuntimeSettings(), http=http).handle(state_event())
        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(http.posts, [])

    def test_email_when_enabled(self) -> None:
        mailer = FakeMailer()
        settings = RuntimeSettings(email_notifications=True, notification_email="ops@example.com")
        resp = self.handler(settings, http=FakeHttp(), mailer=mailer).handle(state_event("FAILED"))

        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(mailer.sent[0]["recipients"], ["ops@example.com"])
        self.assertEqual(mailer.sent[0]["subject"], "LambdaDeploy Pipeline Notification - FAILED")
        self.assertEqual(json.loads(mailer.sent[0]["body"])["attachments"][0]["color"], COLOR_FAILED)

    def test_email_enabled_without_mailer_fails(self) -> None:
        settings = RuntimeSettings(email_notifications=True, notification_email="ops@example.com")
        resp = self.handler(settings, http=FakeHttp()).handle(state_event())
        self.assertEqual(resp["statusCode"], 500)

    def test_invalid_event_sends_error_notification(self) -> None:
        http = FakeHttp()
        resp = self.handler(RuntimeSettings(slack_webhook_url=WEBHOOK), http=http).handle({"detail": {"pipeline": "p"}})

        self.assertEqual(resp["statusCode"], 500)
        body = json.loads(resp["body"])
        self.assertEqual(body["error"], "Failed to process notification")
        self.assertIn("execution-id", body["details"])
        self.assertEqual(len(http.posts), 1)
        self.assertEqual(http.posts[0][1]["attachments"][0]["title"], "\U0001f6a8 Notification Handler Error")

    def test_lookup_failure_returns_500(self) -> None:
        pipelines = FakePipelines(error=NotificationError("get_pipeline_execution failed (PipelineNotFoundException)"))
        resp = self.handler(RuntimeSettings(), pipelines=pipelines, http=FakeHttp()).handle(state_event())
        self.assertEqual(resp["statusCode"], 500)
        self.assertIn("PipelineNotFoundException", json.loads(resp["body"])["details"])

    def test_slack_http_error(self) -> None:
        http = FakeHttp(status_code=500)
        resp = self.handler(RuntimeSettings(slack_webhook_url=WEBHOOK), http=http).handle(state_event())

        self.assertEqual(resp["statusCode"], 500)
        self.assertIn("Slack notification failed", json.loads(resp["body"])["details"])
        self.assertEqual(len(http.posts), 2)

    def test_error_notification_failure_is_logged(self) -> None:
        http = FakeHttp()
        http.error = requests.ConnectionError("unreachable")
        with self.assertLogs("lambdadeploy.notifications.handler", level="ERROR") as logs:
            resp = self.handler(RuntimeSettings(slack_webhook_url=WEBHOOK), http=http).handle(state_event())

        self.assertEqual(resp["statusCode"], 500)
        self.assertIn("failed to send error notification", "\n".join(logs.output))


if __name__ == "__main__":
    unittest.main()
