"""Slack incoming-webhook notifier"""

import httpx
from typing import Any, Dict
from runway_guard.config import settings
from runway_guard.domain.exceptions import NotificationDeliveryError
from runway_guard.domain.models import NotificationMessage, NotificationResult, Severity

SEVERITY_EMOJI = {
    Severity.CRITICAL: ":rotating_light:",
    Severity.WARNING: ":warning:",
    Severity.INFO: ":information_source:",
}


def build_slack_payload(message: NotificationMessage) -> Dict[str, Any]:
    """Block Kit payload: severity header, markdown body, optional action button"""
    blocks = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": f"{SEVERITY_EMOJI[Severity(message.severity)]} {message.title}",
                "emoji": True,
            },
        },
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": message.body},
        },
    ]

    if message.action_url:
        blocks.append(
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "View Details", "emoji": True},
                        "url": message.action_url,
                    }
                ],
            }
        )

    return {"blocks": blocks}


class SlackNotifier:
    """Posts notifications to a per-user Slack webhook URL"""

    channel = "slack"

    def __init__(self, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def send(self, webhook_url: str, message: NotificationMessage) -> NotificationResult:
        """
        Deliver one message. Never raises.

        Any non-2xx response is reported as "Slack API error: <status>".
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                try:
                    response = await client.post(webhook_url, json=build_slack_payload(message))
                except httpx.TimeoutException as e:
                    raise NotificationDeliveryError(f"Slack webhook timeout after {self.timeout}s") from e
                except httpx.RequestError as e:
                    raise NotificationDeliveryError(f"Slack webhook unreachable: {e}") from e

                if not response.is_success:
                    raise NotificationDeliveryError(f"Slack API error: {response.status_code}")

            return NotificationResult(channel=self.channel, success=True)

        except Exception as e:
            return NotificationResult(channel=self.channel, success=False, error=str(e) or type(e).__name__)
