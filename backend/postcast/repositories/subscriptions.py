"""
Subscriptions Repository
"""

from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.models import Plan, Subscription


@dataclass(frozen=True)
class SubscriptionWithPlan:
    """A subscription row joined with its plan row."""
    subscription: Subscription
    plan: Plan

    @property
    def status(self) -> str:
        return self.subscription.status

    @property
    def plan_id(self) -> str:
        return self.subscription.plan_id


class SubscriptionsRepository:
    """Data access for Subscription and Plan rows."""

    async def find_active_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
    ) -> Optional[SubscriptionWithPlan]:
        """Latest active subscription of a user (by start date), with its plan."""
        result = await db.execute(
            select(Subscription, Plan)
            .join(Plan, Plan.id == Subscription.plan_id)
            .where(
                Subscription.user_id == user_id,
                Subscription.is_active.is_(True),
            )
            .order_by(Subscription.start_date.desc())
            .limit(1)
        )
        row = result.first()
        if row is None:
            return None
        return SubscriptionWithPlan(subscription=row[0], plan=row[1])

    async def find_plan_by_id(self, db: AsyncSession, plan_id: str) -> Optional[Plan]:
        result = await db.execute(select(Plan).where(Plan.id == plan_id))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, **attrs: Any) -> Subscription:
        subscription = Subscription(**attrs)
        db.add(subscription)
        await db.flush()
        return subscription


subscriptions_repository = SubscriptionsRepository()
