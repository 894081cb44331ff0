"""Tests for the effective subscription plan."""

from postcast.models import Plan, Subscription
from postcast.repositories import SubscriptionWithPlan
from postcast.services.subscription import PlanLimits, get_effective_plan, project_subscription

FREE_PLAN_ID = "plan-free"


def with_plan(plan_id, status="ACTIVE", **limits):
    plan = Plan(id=plan_id, name=limits.pop("name", "Pro"), **limits)
    subscription = Subscription(user_id="user_1", plan_id=plan_id, status=status)
    return SubscriptionWithPlan(subscription=subscription, plan=plan)


def test_no_subscription_projects_free_tier():
    effective = project_subscription(None, FREE_PLAN_ID)

    assert effective.plan_id is None
    assert effective.plan_name == "Free"
    assert effective.limits == PlanLimits(max_feeds=1, max_authors=1, max_tags=1)
    assert effective.status == "NONE"
    assert effective.show_upgrade_button is True


def test_free_plan_keeps_feed_and_tag_caps():
    subscription = with_plan(
        FREE_PLAN_ID, name="Free", max_feeds=5, max_authors=3, max_tags=5
    )

    effective = project_subscription(subscription, FREE_PLAN_ID)

    assert effective.plan_id == FREE_PLAN_ID
    assert effective.limits == PlanLimits(max_feeds=1, max_authors=3, max_tags=1)
    assert effective.show_upgrade_button is True


def test_paid_plan_uses_stored_limits():
    subscription = with_plan("plan-pro", max_feeds=10, max_authors=20, max_tags=30)

    effective = project_subscription(subscription, FREE_PLAN_ID)

    assert effective.plan_name == "Pro"
    assert effective.limits == PlanLimits(max_feeds=10, max_authors=20, max_tags=30)
    assert effective.status == "ACTIVE"
    assert effective.show_upgrade_button is False


def test_status_is_passed_through():
    subscription = with_plan("plan-pro", status="PAST_DUE", max_feeds=10, max_authors=10, max_tags=10)

    assert project_subscription(subscription, FREE_PLAN_ID).status == "PAST_DUE"


async def test_get_effective_plan_reads_current_state(db, factory):
    user = await factory.user()

    assert (await get_effective_plan(db, user.id)).plan_name == "Free"

    plan = await factory.plan(name="Pro", max_feeds=10)
    await factory.subscription(user, plan)

    effective = await get_effective_plan(db, user.id)
    assert effective.plan_name == "Pro"
    assert effective.limits.max_feeds == 10


async def test_get_effective_plan_ignores_inactive_rows(db, factory):
    user = await factory.user()
    plan = await factory.plan(name="Pro")
    await factory.subscription(user, plan, is_active=False, status="CANCELED")

    effective = await get_effective_plan(db, user.id)

    assert effective.plan_id is None
    assert effective.status == "NONE"
