"""
Feed Limit Policy

Decides whether a proposed feed configuration fits within the quotas
of the user's subscription plan. Checks run in a fixed order and stop
at the first violation.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import (
    AuthorCountExceededError,
    FeedCountExceededError,
    LimitExceededError,
    SubscriptionInactiveError,
    TagCountExceededError,
)
from postcast.models import SubscriptionStatus
from postcast.repositories import SubscriptionWithPlan, personalized_feeds_repository
from postcast.services.feeds.types import FilterGroupInput

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeedLimitCandidate:
    """Filter counts of the configuration being created or updated."""
    tag_count: int = 0
    author_count: int = 0

    @classmethod
    def from_filter_groups(cls, groups: Iterable[FilterGroupInput]) -> "FeedLimitCandidate":
        """Sum counts over every group; multiple groups add up."""
        tag_count = 0
        author_count = 0
        for group in groups:
            tag_count += group.tag_count
            author_count += group.author_count
        return cls(tag_count=tag_count, author_count=author_count)


def ensure_subscription_active(subscription: Optional[SubscriptionWithPlan]) -> SubscriptionWithPlan:
    if subscription is None:
        raise SubscriptionInactiveError("No active subscription")
    if subscription.status != SubscriptionStatus.ACTIVE.value:
        raise SubscriptionInactiveError(
            f"Subscription is not active (status: {subscription.status})",
            status=subscription.status,
        )
    return subscription


def evaluate_feed_limits(
    subscription: Optional[SubscriptionWithPlan],
    active_feed_count: int,
    candidate: FeedLimitCandidate,
) -> None:
    """
    Pure quota check.

    Args:
        subscription: The user's current subscription with its plan.
        active_feed_count: Active feeds of the user, excluding the feed
            being updated.
        candidate: Filter counts of the proposed configuration.

    Raises:
        SubscriptionInactiveError, FeedCountExceededError,
        TagCountExceededError, AuthorCountExceededError
    """
    plan = ensure_subscription_active(subscription).plan

    if active_feed_count + 1 > plan.max_feeds:
        raise FeedCountExceededError(
            f"Feed limit reached for plan {plan.name} (max {plan.max_feeds})",
            current=active_feed_count,
            limit=plan.max_feeds,
        )

    if candidate.tag_count > plan.max_tags:
        raise TagCountExceededError(
            f"Tag filter limit exceeded for plan {plan.name} (max {plan.max_tags})",
            requested=candidate.tag_count,
            limit=plan.max_tags,
        )

    if candidate.author_count > plan.max_authors:
        raise AuthorCountExceededError(
            f"Author filter limit exceeded for plan {plan.name} (max {plan.max_authors})",
            requested=candidate.author_count,
            limit=plan.max_authors,
        )


async def check_feed_creation_limits(
    db: AsyncSession,
    user_id: str,
    subscription: Optional[SubscriptionWithPlan],
    candidate: FeedLimitCandidate,
    feed_id: Optional[str] = None,
) -> None:
    """
    Verify a create (or, with `feed_id`, an update) against plan quotas.

    The subscription status is checked before counting so an inactive
    subscription costs no query.
    """
    ensure_subscription_active(subscription)

    active_feed_count = await personalized_feeds_repository.count_active_by_user_id(
        db,
        user_id,
        exclude_id=feed_id,
    )

    try:
        evaluate_feed_limits(subscription, active_feed_count, candidate)
    except LimitExceededError as e:
        logger.info(
            "Feed limit check rejected request",
            user_id=user_id,
            feed_id=feed_id,
            reason=type(e).__name__,
        )
        raise
