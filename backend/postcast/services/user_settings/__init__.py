"""
User settings services.
"""

from postcast.services.user_settings.service import (
    UserSettings,
    UserSettingsService,
    UserSettingsUpdate,
    get_rss_url,
    user_settings_service,
)
from postcast.services.user_settings.slack import (
    SlackWebhookClient,
    SlackWebhookTestResult,
    slack_webhook_client,
    validate_slack_webhook_url,
)

__all__ = [
    "UserSettings",
    "UserSettingsService",
    "UserSettingsUpdate",
    "get_rss_url",
    "user_settings_service",
    "SlackWebhookClient",
    "SlackWebhookTestResult",
    "slack_webhook_client",
    "validate_slack_webhook_url",
]
