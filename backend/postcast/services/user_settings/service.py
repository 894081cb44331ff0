"""
User Settings Service

Reads and updates per-user settings. Changes to `rss_enabled` are
routed through the RSS lifecycle coordinator.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.config.settings import settings
from postcast.models import AppUser
from postcast.repositories import app_users_repository
from postcast.services.rss import (
    RssEnabled,
    RssLifecycleCoordinator,
    rss_lifecycle_coordinator,
    rss_state_of,
)
from postcast.services.user_settings.slack import (
    SlackWebhookClient,
    SlackWebhookTestResult,
    slack_webhook_client,
    validate_slack_webhook_url,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserSettings:
    user_id: str
    display_name: str
    slack_webhook_url: Optional[str]
    notification_enabled: bool
    rss_enabled: bool
    rss_token: Optional[str]
    rss_url: Optional[str]
    updated_at: Optional[datetime]


@dataclass
class UserSettingsUpdate:
    """Fields left as None are not changed. An empty webhook URL clears it."""
    display_name: Optional[str] = None
    slack_webhook_url: Optional[str] = None
    notification_enabled: Optional[bool] = None
    rss_enabled: Optional[bool] = None


def get_rss_url(user: AppUser) -> Optional[str]:
    state = rss_state_of(user)
    if isinstance(state, RssEnabled):
        return state.url(settings.rss_url_prefix)
    return None


def to_user_settings(user: AppUser) -> UserSettings:
    state = rss_state_of(user)
    return UserSettings(
        user_id=user.id,
        display_name=user.display_name,
        slack_webhook_url=user.slack_webhook_url,
        notification_enabled=user.notification_enabled,
        rss_enabled=isinstance(state, RssEnabled),
        rss_token=state.token if isinstance(state, RssEnabled) else None,
        rss_url=get_rss_url(user),
        updated_at=user.updated_at,
    )


class UserSettingsService:
    def __init__(
        self,
        rss_coordinator: Optional[RssLifecycleCoordinator] = None,
        slack_client: Optional[SlackWebhookClient] = None,
    ):
        self._rss = rss_coordinator or rss_lifecycle_coordinator
        self._slack = slack_client or slack_webhook_client

    async def get_user_settings(self, db: AsyncSession, user_id: str) -> UserSettings:
        user = await app_users_repository.find_active_by_id(db, user_id)
        return to_user_settings(user)

    async def update_user_settings(
        self,
        db: AsyncSession,
        user_id: str,
        params: UserSettingsUpdate,
    ) -> UserSettings:
        """
        Apply profile and notification changes, then enable or disable RSS
        when `rss_enabled` differs from the stored state.

        Raises:
            UserNotFoundError: If the user does not exist.
            SlackWebhookValidationError: On a malformed webhook URL.
        """
        if params.slack_webhook_url:
            validate_slack_webhook_url(params.slack_webhook_url)

        user = await app_users_repository.find_active_by_id(db, user_id)

        if params.display_name is not None:
            user.display_name = params.display_name
        if params.slack_webhook_url is not None:
            user.slack_webhook_url = params.slack_webhook_url or None
        if params.notification_enabled is not None:
            user.notification_enabled = params.notification_enabled

        await app_users_repository.save(db, user)
        await db.commit()

        logger.info(
            "User settings updated",
            user_id=user_id,
            notification_enabled=user.notification_enabled,
            has_slack_webhook=bool(user.slack_webhook_url),
        )

        if params.rss_enabled is not None:
            currently_enabled = isinstance(rss_state_of(user), RssEnabled)
            if params.rss_enabled and not currently_enabled:
                user = await self._rss.enable(db, user)
            elif not params.rss_enabled and (currently_enabled or user.rss_token):
                user = await self._rss.disable(db, user)

        return to_user_settings(user)

    async def regenerate_rss_token(self, db: AsyncSession, user_id: str) -> UserSettings:
        """
        Raises:
            RssNotEnabledError: If RSS is not enabled for the user.
        """
        user = await app_users_repository.find_active_by_id(db, user_id)
        user = await self._rss.rotate(db, user)
        return to_user_settings(user)

    async def test_slack_webhook(self, webhook_url: str) -> SlackWebhookTestResult:
        return await self._slack.test_webhook(webhook_url)


user_settings_service = UserSettingsService()
