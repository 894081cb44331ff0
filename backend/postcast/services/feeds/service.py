"""
Personalized Feeds Service

Entry point used by the API routes: ownership checks, quota checks and
delegation to the transaction manager.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import FeedNotFoundError
from postcast.models import AppUser, FeedFilterGroup
from postcast.repositories import (
    app_users_repository,
    feed_filters_repository,
    personalized_feeds_repository,
    subscriptions_repository,
)
from postcast.services.feeds.limits import FeedLimitCandidate, check_feed_creation_limits
from postcast.services.feeds.transactions import feed_transaction_manager
from postcast.services.feeds.types import (
    FeedInput,
    FeedPatch,
    FeedWithFilterGroupResult,
    FilterGroupInput,
)

logger = get_logger(__name__)


@dataclass
class FeedsPage:
    feeds: List[FeedWithFilterGroupResult] = field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int = 20


class PersonalizedFeedsService:
    """
    Business operations on personalized feeds.

    A feed that is missing, inactive, or owned by someone else is always
    reported as not found.
    """

    async def validate_user_exists(self, db: AsyncSession, user_id: str) -> AppUser:
        return await app_users_repository.find_active_by_id(db, user_id)

    async def find_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        page: int = 1,
        per_page: int = 20,
        include_filters: bool = False,
    ) -> FeedsPage:
        await self.validate_user_exists(db, user_id)

        feeds, total = await personalized_feeds_repository.find_by_user_id(
            db, user_id, page=page, per_page=per_page
        )
        if not include_filters:
            return FeedsPage(
                feeds=[FeedWithFilterGroupResult(feed=feed) for feed in feeds],
                total=total,
                page=page,
                per_page=per_page,
            )

        # First group per feed, children fetched in bulk
        groups = await feed_filters_repository.find_groups_by_feed_ids(
            db, [feed.id for feed in feeds]
        )
        group_by_feed: Dict[str, FeedFilterGroup] = {}
        for group in groups:
            group_by_feed.setdefault(group.feed_id, group)

        group_ids = [group.id for group in group_by_feed.values()]
        tags = await feed_filters_repository.find_tag_filters_by_group_ids(db, group_ids)
        authors = await feed_filters_repository.find_author_filters_by_group_ids(db, group_ids)
        date_ranges = await feed_filters_repository.find_date_range_filters_by_group_ids(
            db, group_ids
        )
        likes_counts = await feed_filters_repository.find_likes_count_filters_by_group_ids(
            db, group_ids
        )

        results = []
        for feed in feeds:
            group = group_by_feed.get(feed.id)
            if group is None:
                results.append(FeedWithFilterGroupResult(feed=feed))
                continue
            results.append(
                FeedWithFilterGroupResult(
                    feed=feed,
                    filter_group=group,
                    tag_filters=[f for f in tags if f.group_id == group.id],
                    author_filters=[f for f in authors if f.group_id == group.id],
                    date_range_filters=[f for f in date_ranges if f.group_id == group.id],
                    likes_count_filters=[f for f in likes_counts if f.group_id == group.id],
                )
            )

        return FeedsPage(feeds=results, total=total, page=page, per_page=per_page)

    async def find_by_id(
        self,
        db: AsyncSession,
        feed_id: str,
        user_id: str,
    ) -> FeedWithFilterGroupResult:
        feed = await personalized_feeds_repository.find_active_by_id_for_user(db, feed_id, user_id)
        if feed is None:
            logger.warning("Feed not found", feed_id=feed_id, user_id=user_id)
            raise FeedNotFoundError(feed_id, user_id)
        return await feed_transaction_manager.load_feed_with_filter_group(db, feed)

    async def create(
        self,
        db: AsyncSession,
        feed: FeedInput,
        filter_group: FilterGroupInput,
    ) -> FeedWithFilterGroupResult:
        """Check quotas, then create the feed and its filters atomically."""
        await self.validate_user_exists(db, feed.user_id)

        subscription = await subscriptions_repository.find_active_by_user_id(db, feed.user_id)
        await check_feed_creation_limits(
            db,
            feed.user_id,
            subscription,
            FeedLimitCandidate.from_filter_groups([filter_group]),
        )

        return await feed_transaction_manager.create_feed_with_filter_group(db, feed, filter_group)

    async def update(
        self,
        db: AsyncSession,
        feed_id: str,
        user_id: str,
        feed_patch: Optional[FeedPatch] = None,
        filter_group: Optional[FilterGroupInput] = None,
    ) -> FeedWithFilterGroupResult:
        """Check quotas against the post-update state, then update atomically."""
        await self.validate_user_exists(db, user_id)
        current = await self.find_by_id(db, feed_id, user_id)

        subscription = await subscriptions_repository.find_active_by_user_id(db, user_id)
        await check_feed_creation_limits(
            db,
            user_id,
            subscription,
            self._candidate_after_update(current, filter_group),
            feed_id=feed_id,
        )

        return await feed_transaction_manager.update_feed_with_filter_group(
            db,
            feed_id,
            user_id,
            feed_patch=feed_patch,
            filter_group=filter_group,
        )

    async def delete(self, db: AsyncSession, feed_id: str, user_id: str) -> None:
        """Soft delete. Child rows are kept."""
        await self.validate_user_exists(db, user_id)

        deleted = await personalized_feeds_repository.soft_delete(db, feed_id, user_id)
        if not deleted:
            raise FeedNotFoundError(feed_id, user_id)
        await db.commit()

        logger.info("Feed deactivated", feed_id=feed_id, user_id=user_id)

    @staticmethod
    def _candidate_after_update(
        current: FeedWithFilterGroupResult,
        filter_group: Optional[FilterGroupInput],
    ) -> FeedLimitCandidate:
        tag_count = len(current.tag_filters)
        author_count = len(current.author_filters)
        if filter_group is not None:
            if filter_group.tag_filters is not None:
                tag_count = len(filter_group.tag_filters)
            if filter_group.author_filters is not None:
                author_count = len(filter_group.author_filters)
        return FeedLimitCandidate(tag_count=tag_count, author_count=author_count)


personalized_feeds_service = PersonalizedFeedsService()
