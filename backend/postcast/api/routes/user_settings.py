"""
User Settings API Routes

Profile, Slack notification and personal RSS settings of the current user.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.api.middleware import get_current_user_id
from postcast.api.schemas import (
    RegenerateRssTokenResponse,
    TestSlackWebhookRequest,
    TestSlackWebhookResponse,
    UpdateUserSettingsRequest,
    UserSettingsResponse,
)
from postcast.config.logging import get_logger, mask_token
from postcast.db import get_db_session
from postcast.services.user_settings import UserSettingsUpdate, user_settings_service

logger = get_logger(__name__)

router = APIRouter(prefix="/user-settings", tags=["User Settings"])


@router.get("", response_model=UserSettingsResponse)
async def get_user_settings(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserSettingsResponse:
    result = await user_settings_service.get_user_settings(db, user_id)
    return UserSettingsResponse.model_validate(result)


@router.patch("", response_model=UserSettingsResponse)
async def update_user_settings(
    request: UpdateUserSettingsRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserSettingsResponse:
    """
    Update settings.

    Switching `rss_enabled` on publishes the personal RSS file; switching
    it off deletes it. Storage failures do not fail the request.
    """
    result = await user_settings_service.update_user_settings(
        db,
        user_id,
        UserSettingsUpdate(
            display_name=request.display_name,
            slack_webhook_url=request.slack_webhook_url,
            notification_enabled=request.notification_enabled,
            rss_enabled=request.rss_enabled,
        ),
    )
    return UserSettingsResponse.model_validate(result)


@router.post("/rss/regenerate-token", response_model=RegenerateRssTokenResponse)
async def regenerate_rss_token(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> RegenerateRssTokenResponse:
    """Rotate the RSS token. 400 if RSS is not enabled."""
    result = await user_settings_service.regenerate_rss_token(db, user_id)

    logger.info("RSS token regenerated", user_id=user_id, rss_token=mask_token(result.rss_token))

    return RegenerateRssTokenResponse(
        rss_token=result.rss_token,
        rss_url=result.rss_url,
        updated_at=result.updated_at,
    )


@router.post("/test-slack-webhook", response_model=TestSlackWebhookResponse)
async def test_slack_webhook(
    request: TestSlackWebhookRequest,
    user_id: str = Depends(get_current_user_id),
) -> TestSlackWebhookResponse:
    result = await user_settings_service.test_slack_webhook(request.webhook_url)
    return TestSlackWebhookResponse(
        success=result.success,
        error_message=result.error_message,
        response_time=result.response_time,
    )
