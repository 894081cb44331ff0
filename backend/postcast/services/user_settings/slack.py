"""
Slack Webhook Client

Validates incoming-webhook URLs and sends a test notification.
"""

import re
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from postcast.config.logging import get_logger, mask_webhook_url
from postcast.config.settings import settings
from postcast.errors import SlackWebhookTestError, SlackWebhookValidationError

logger = get_logger(__name__)

SLACK_WEBHOOK_PATTERN = re.compile(
    r"^https://hooks\.slack\.com/services/[A-Z0-9]+/[A-Z0-9]+/[a-zA-Z0-9]+$"
)

TEST_MESSAGE = {
    "username": "TechPostCast テスト通知",
    "icon_emoji": ":test_tube:",
    "text": "Slack Webhook URLの接続テストです。この通知が表示されれば設定は正常です。",
}


@dataclass(frozen=True)
class SlackWebhookTestResult:
    success: bool
    response_time: int
    error_message: Optional[str] = None


def validate_slack_webhook_url(webhook_url: Optional[str]) -> str:
    """
    Raises:
        SlackWebhookValidationError: If the URL is empty or not a Slack
            incoming-webhook URL.
    """
    if not webhook_url:
        raise SlackWebhookValidationError("Slack webhook URL is required")
    if not SLACK_WEBHOOK_PATTERN.match(webhook_url):
        raise SlackWebhookValidationError("Invalid Slack webhook URL format")
    return webhook_url


class SlackWebhookClient:
    """Posts messages to Slack incoming webhooks with httpx."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def test_webhook(self, webhook_url: str) -> SlackWebhookTestResult:
        """
        Send a test message.

        A non-2xx reply from Slack is reported as an unsuccessful result.

        Raises:
            SlackWebhookValidationError: On a malformed URL.
            SlackWebhookTestError: If the request could not be sent.
        """
        validate_slack_webhook_url(webhook_url)
        masked = mask_webhook_url(webhook_url)
        started = time.monotonic()

        try:
            async with httpx.AsyncClient(
                timeout=settings.slack_webhook_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(webhook_url, json=TEST_MESSAGE)
        except httpx.HTTPError as e:
            elapsed = int((time.monotonic() - started) * 1000)
            logger.error(
                "Slack webhook test request failed",
                webhook_url=masked,
                error=str(e),
                response_time=elapsed,
            )
            raise SlackWebhookTestError(f"Slack webhook test failed: {e}") from e

        elapsed = int((time.monotonic() - started) * 1000)

        if not response.is_success:
            error_message = f"Slack API error: {response.status_code} {response.reason_phrase}"
            logger.warning(
                "Slack webhook test rejected",
                webhook_url=masked,
                status_code=response.status_code,
                response_time=elapsed,
            )
            return SlackWebhookTestResult(
                success=False,
                response_time=elapsed,
                error_message=error_message,
            )

        logger.info("Slack webhook test succeeded", webhook_url=masked, response_time=elapsed)
        return SlackWebhookTestResult(success=True, response_time=elapsed)


slack_webhook_client = SlackWebhookClient()
