"""
Personalized feed services.

Quota policy, transactional create/update and the service facade used
by the API routes.
"""

from postcast.services.feeds.limits import (
    FeedLimitCandidate,
    check_feed_creation_limits,
    evaluate_feed_limits,
)
from postcast.services.feeds.service import (
    FeedsPage,
    PersonalizedFeedsService,
    personalized_feeds_service,
)
from postcast.services.feeds.transactions import (
    FeedTransactionManager,
    feed_transaction_manager,
    validate_filter_group,
)
from postcast.services.feeds.types import (
    FeedInput,
    FeedPatch,
    FeedWithFilterGroupResult,
    FilterGroupInput,
)

__all__ = [
    "FeedInput",
    "FeedPatch",
    "FilterGroupInput",
    "FeedWithFilterGroupResult",
    "FeedLimitCandidate",
    "check_feed_creation_limits",
    "evaluate_feed_limits",
    "FeedTransactionManager",
    "feed_transaction_manager",
    "validate_filter_group",
    "FeedsPage",
    "PersonalizedFeedsService",
    "personalized_feeds_service",
]
