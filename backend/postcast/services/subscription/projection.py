"""
Subscription Status Projection

Computes the plan a user is effectively on. Users without an active
subscription, or on the configured Free plan, get the Free tier limits.
Read-only and uncached: every call reflects the current database state.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.config.settings import settings
from postcast.models import SubscriptionStatus
from postcast.repositories import SubscriptionWithPlan, subscriptions_repository

logger = get_logger(__name__)

FREE_PLAN_NAME = "Free"
FREE_MAX_FEEDS = 1
FREE_MAX_TAGS = 1
FREE_MAX_AUTHORS = 1


@dataclass(frozen=True)
class PlanLimits:
    max_feeds: int
    max_authors: int
    max_tags: int


@dataclass(frozen=True)
class EffectivePlan:
    plan_id: Optional[str]
    plan_name: str
    limits: PlanLimits
    status: str
    show_upgrade_button: bool


def project_subscription(
    subscription: Optional[SubscriptionWithPlan],
    free_plan_id: str,
) -> EffectivePlan:
    """Pure projection of a subscription row onto the effective plan."""
    if subscription is None:
        return EffectivePlan(
            plan_id=None,
            plan_name=FREE_PLAN_NAME,
            limits=PlanLimits(
                max_feeds=FREE_MAX_FEEDS,
                max_authors=FREE_MAX_AUTHORS,
                max_tags=FREE_MAX_TAGS,
            ),
            status=SubscriptionStatus.NONE.value,
            show_upgrade_button=True,
        )

    plan = subscription.plan
    if subscription.plan_id == free_plan_id:
        return EffectivePlan(
            plan_id=subscription.plan_id,
            plan_name=plan.name or FREE_PLAN_NAME,
            limits=PlanLimits(
                max_feeds=FREE_MAX_FEEDS,
                max_authors=plan.max_authors if plan.max_authors is not None else FREE_MAX_AUTHORS,
                max_tags=FREE_MAX_TAGS,
            ),
            status=subscription.status or SubscriptionStatus.NONE.value,
            show_upgrade_button=True,
        )

    return EffectivePlan(
        plan_id=subscription.plan_id,
        plan_name=plan.name,
        limits=PlanLimits(
            max_feeds=plan.max_feeds,
            max_authors=plan.max_authors,
            max_tags=plan.max_tags,
        ),
        status=subscription.status or SubscriptionStatus.NONE.value,
        show_upgrade_button=False,
    )


async def get_effective_plan(db: AsyncSession, user_id: str) -> EffectivePlan:
    subscription = await subscriptions_repository.find_active_by_user_id(db, user_id)
    effective = project_subscription(subscription, settings.free_plan_id)

    logger.debug(
        "Resolved effective plan",
        user_id=user_id,
        plan_name=effective.plan_name,
        status=effective.status,
    )
    return effective
