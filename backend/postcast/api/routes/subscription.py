"""
Subscription API Routes

Effective plan, limits and current usage of the authenticated user.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.api.middleware import get_current_user_id
from postcast.api.schemas import (
    PlanLimitsResponse,
    SubscriptionResponse,
    SubscriptionUsageResponse,
)
from postcast.db import get_db_session
from postcast.repositories import feed_filters_repository, personalized_feeds_repository
from postcast.services.subscription import get_effective_plan

router = APIRouter(prefix="/subscription", tags=["Subscription"])


@router.get("", response_model=SubscriptionResponse)
async def get_subscription(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> SubscriptionResponse:
    """Free tier limits apply when there is no active subscription."""
    effective = await get_effective_plan(db, user_id)
    feed_count = await personalized_feeds_repository.count_active_by_user_id(db, user_id)
    filter_counts = await feed_filters_repository.count_filters_by_user_id(db, user_id)

    return SubscriptionResponse(
        plan_id=effective.plan_id,
        plan_name=effective.plan_name,
        status=effective.status,
        limits=PlanLimitsResponse(
            max_feeds=effective.limits.max_feeds,
            max_authors=effective.limits.max_authors,
            max_tags=effective.limits.max_tags,
        ),
        usage=SubscriptionUsageResponse(
            feeds=feed_count,
            authors=filter_counts["authors"],
            tags=filter_counts["tags"],
        ),
        show_upgrade_button=effective.show_upgrade_button,
    )
