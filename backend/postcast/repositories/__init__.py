"""
Repositories package.

Repository singletons take an AsyncSession per call and never commit.
"""

from postcast.repositories.app_users import AppUsersRepository, app_users_repository
from postcast.repositories.personalized_feeds import (
    FeedFiltersRepository,
    PersonalizedFeedsRepository,
    feed_filters_repository,
    personalized_feeds_repository,
)
from postcast.repositories.programs import (
    AttemptHistoryRow,
    ProgramSummaryRow,
    PersonalizedProgramsRepository,
    ProgramAttemptsRepository,
    personalized_programs_repository,
    program_attempts_repository,
)
from postcast.repositories.subscriptions import (
    SubscriptionWithPlan,
    SubscriptionsRepository,
    subscriptions_repository,
)

__all__ = [
    "AppUsersRepository",
    "app_users_repository",
    "PersonalizedFeedsRepository",
    "personalized_feeds_repository",
    "FeedFiltersRepository",
    "feed_filters_repository",
    "ProgramSummaryRow",
    "AttemptHistoryRow",
    "PersonalizedProgramsRepository",
    "personalized_programs_repository",
    "ProgramAttemptsRepository",
    "program_attempts_repository",
    "SubscriptionWithPlan",
    "SubscriptionsRepository",
    "subscriptions_repository",
]
