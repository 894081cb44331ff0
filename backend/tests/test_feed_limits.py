"""Tests for subscription quota checks on feed create and update."""

from datetime import timedelta

import pytest

from postcast.errors import (
    AuthorCountExceededError,
    FeedCountExceededError,
    LimitExceededError,
    SubscriptionInactiveError,
    TagCountExceededError,
)
from postcast.models import Plan, Subscription
from postcast.repositories import SubscriptionWithPlan, subscriptions_repository
from postcast.services.feeds import FeedLimitCandidate, FilterGroupInput
from postcast.services.feeds.limits import check_feed_creation_limits, evaluate_feed_limits
from tests.factories import BASE_TIME


def subscription_with(status="ACTIVE", max_feeds=10, max_tags=10, max_authors=10):
    plan = Plan(id="plan-pro", name="Pro", max_feeds=max_feeds, max_tags=max_tags, max_authors=max_authors)
    subscription = Subscription(user_id="user_1", plan_id=plan.id, status=status)
    return SubscriptionWithPlan(subscription=subscription, plan=plan)


class TestEvaluateFeedLimits:
    def test_allows_creation_below_feed_limit(self):
        evaluate_feed_limits(subscription_with(max_feeds=10), 9, FeedLimitCandidate())

    def test_rejects_creation_at_feed_limit(self):
        with pytest.raises(FeedCountExceededError) as exc_info:
            evaluate_feed_limits(subscription_with(max_feeds=10), 10, FeedLimitCandidate())

        assert exc_info.value.status_code == 403
        assert exc_info.value.context["limit"] == 10

    def test_tag_limit_is_inclusive(self):
        evaluate_feed_limits(subscription_with(max_tags=3), 0, FeedLimitCandidate(tag_count=3))

        with pytest.raises(TagCountExceededError):
            evaluate_feed_limits(subscription_with(max_tags=3), 0, FeedLimitCandidate(tag_count=4))

    def test_author_limit_is_inclusive(self):
        evaluate_feed_limits(subscription_with(max_authors=2), 0, FeedLimitCandidate(author_count=2))

        with pytest.raises(AuthorCountExceededError):
            evaluate_feed_limits(
                subscription_with(max_authors=2), 0, FeedLimitCandidate(author_count=3)
            )

    def test_feed_count_is_reported_before_filter_counts(self):
        candidate = FeedLimitCandidate(tag_count=100, author_count=100)

        with pytest.raises(FeedCountExceededError):
            evaluate_feed_limits(subscription_with(max_feeds=1), 1, candidate)

    def test_tag_count_is_reported_before_author_count(self):
        candidate = FeedLimitCandidate(tag_count=100, author_count=100)

        with pytest.raises(TagCountExceededError):
            evaluate_feed_limits(subscription_with(), 0, candidate)

    def test_missing_subscription(self):
        with pytest.raises(SubscriptionInactiveError):
            evaluate_feed_limits(None, 0, FeedLimitCandidate())

    @pytest.mark.parametrize("status", ["EXPIRED", "CANCELED", "PAST_DUE", "NONE"])
    def test_inactive_subscription_status(self, status):
        with pytest.raises(SubscriptionInactiveError):
            evaluate_feed_limits(subscription_with(status=status), 0, FeedLimitCandidate())

    def test_all_limit_errors_share_a_base(self):
        assert issubclass(SubscriptionInactiveError, LimitExceededError)
        assert issubclass(FeedCountExceededError, LimitExceededError)


def test_candidate_sums_filter_groups():
    groups = [
        FilterGroupInput(tag_filters=["python", "go"], author_filters=["alice"]),
        FilterGroupInput(tag_filters=["rust"], author_filters=None),
    ]

    candidate = FeedLimitCandidate.from_filter_groups(groups)

    assert candidate == FeedLimitCandidate(tag_count=3, author_count=1)


class TestCheckFeedCreationLimits:
    async def test_counts_only_active_feeds(self, db, factory):
        user = await factory.user()
        plan = await factory.plan(max_feeds=3)
        await factory.subscription(user, plan)
        await factory.feeds(user, 2)
        await factory.feeds(user, 5, is_active=False)

        subscription = await subscriptions_repository.find_active_by_user_id(db, user.id)
        await check_feed_creation_limits(db, user.id, subscription, FeedLimitCandidate())

    async def test_rejects_when_active_feeds_fill_plan(self, db, factory):
        user = await factory.user()
        plan = await factory.plan(max_feeds=10)
        await factory.subscription(user, plan)
        await factory.feeds(user, 10)

        subscription = await subscriptions_repository.find_active_by_user_id(db, user.id)
        with pytest.raises(FeedCountExceededError):
            await check_feed_creation_limits(db, user.id, subscription, FeedLimitCandidate())

    async def test_update_excludes_the_feed_itself(self, db, factory):
        user = await factory.user()
        plan = await factory.plan(max_feeds=2)
        await factory.subscription(user, plan)
        feeds = await factory.feeds(user, 2)

        subscription = await subscriptions_repository.find_active_by_user_id(db, user.id)
        await check_feed_creation_limits(
            db, user.id, subscription, FeedLimitCandidate(), feed_id=feeds[0].id
        )

    async def test_inactive_subscription_skips_counting(self, db, monkeypatch):
        async def fail_count(*args, **kwargs):
            raise AssertionError("feeds should not be counted")

        monkeypatch.setattr(
            "postcast.services.feeds.limits.personalized_feeds_repository.count_active_by_user_id",
            fail_count,
        )

        with pytest.raises(SubscriptionInactiveError):
            await check_feed_creation_limits(
                db, "user_1", subscription_with(status="EXPIRED"), FeedLimitCandidate()
            )

    async def test_latest_active_subscription_wins(self, db, factory):
        user = await factory.user()
        small = await factory.plan(max_feeds=1)
        large = await factory.plan(max_feeds=5)
        await factory.subscription(user, small, start_date=BASE_TIME)
        await factory.subscription(user, large, start_date=BASE_TIME + timedelta(days=30))
        await factory.feeds(user, 2)

        subscription = await subscriptions_repository.find_active_by_user_id(db, user.id)

        assert subscription.plan.max_feeds == 5
        await check_feed_creation_limits(db, user.id, subscription, FeedLimitCandidate())
