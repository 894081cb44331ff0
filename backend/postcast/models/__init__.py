"""
Models package.

Exports all SQLAlchemy models.
"""

from postcast.models.feed import (
    AuthorFilter,
    DateRangeFilter,
    FeedFilterGroup,
    LikesCountFilter,
    PersonalizedFeed,
    TagFilter,
)
from postcast.models.program import (
    AttemptStatus,
    PersonalizedProgram,
    PersonalizedProgramAttempt,
    PersonalizedProgramPost,
)
from postcast.models.subscription import Plan, Subscription, SubscriptionStatus
from postcast.models.user import AppUser

__all__ = [
    # User
    "AppUser",
    # Feeds
    "PersonalizedFeed",
    "FeedFilterGroup",
    "TagFilter",
    "AuthorFilter",
    "DateRangeFilter",
    "LikesCountFilter",
    # Subscription
    "Plan",
    "Subscription",
    "SubscriptionStatus",
    # Programs
    "PersonalizedProgram",
    "PersonalizedProgramPost",
    "PersonalizedProgramAttempt",
    "AttemptStatus",
]
