"""
Feed Transaction Manager

Creates and updates a personalized feed together with its filter group
and child filters in a single database transaction.

Child collections follow replace semantics on update: a collection that
is present is deleted and re-inserted in full, an empty list clears it,
and an omitted (None) collection is left untouched.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import FeedNotFoundError, FilterValidationError
from postcast.models import FeedFilterGroup, PersonalizedFeed
from postcast.repositories import feed_filters_repository, personalized_feeds_repository
from postcast.services.feeds.types import (
    LOGIC_TYPES,
    FeedInput,
    FeedPatch,
    FeedWithFilterGroupResult,
    FilterGroupInput,
)

logger = get_logger(__name__)

DEFAULT_LOGIC_TYPE = "OR"


def validate_filter_group(filter_group: FilterGroupInput) -> None:
    """
    Reject filter groups that can never be persisted.

    Raises:
        FilterValidationError: On more than one date-range or likes-count
            filter, or out-of-range values.
    """
    if filter_group.logic_type is not None and filter_group.logic_type not in LOGIC_TYPES:
        raise FilterValidationError(
            f"logic_type must be one of {', '.join(LOGIC_TYPES)}",
            logic_type=filter_group.logic_type,
        )

    date_ranges = filter_group.date_range_filters or []
    if len(date_ranges) > 1:
        raise FilterValidationError(
            "A filter group can have at most one date range filter",
            count=len(date_ranges),
        )
    if any(days_ago < 1 for days_ago in date_ranges):
        raise FilterValidationError("days_ago must be 1 or greater")

    likes_counts = filter_group.likes_count_filters or []
    if len(likes_counts) > 1:
        raise FilterValidationError(
            "A filter group can have at most one likes count filter",
            count=len(likes_counts),
        )
    if any(min_likes < 0 for min_likes in likes_counts):
        raise FilterValidationError("min_likes must be 0 or greater")


class FeedTransactionManager:
    """Atomic multi-table writes for feeds and their filters."""

    async def create_feed_with_filter_group(
        self,
        db: AsyncSession,
        feed: FeedInput,
        filter_group: FilterGroupInput,
    ) -> FeedWithFilterGroupResult:
        """
        Insert a feed, its filter group and all child filters.

        Either every row is committed or none is.
        """
        validate_filter_group(filter_group)

        try:
            feed_row = await personalized_feeds_repository.create(db, **feed.to_attrs())
            group_row = await feed_filters_repository.create_group(
                db,
                feed_id=feed_row.id,
                name=filter_group.name or feed.name,
                logic_type=filter_group.logic_type or DEFAULT_LOGIC_TYPE,
            )

            result = FeedWithFilterGroupResult(feed=feed_row, filter_group=group_row)
            result.tag_filters = await feed_filters_repository.create_tag_filters(
                db, group_row.id, filter_group.tag_filters or []
            )
            result.author_filters = await feed_filters_repository.create_author_filters(
                db, group_row.id, filter_group.author_filters or []
            )
            result.date_range_filters = await feed_filters_repository.create_date_range_filters(
                db, group_row.id, filter_group.date_range_filters or []
            )
            result.likes_count_filters = await feed_filters_repository.create_likes_count_filters(
                db, group_row.id, filter_group.likes_count_filters or []
            )

            await db.commit()

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to create feed with filter group",
                user_id=feed.user_id,
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info(
            "Created feed with filter group",
            feed_id=result.feed.id,
            user_id=feed.user_id,
            tags=len(result.tag_filters),
            authors=len(result.author_filters),
        )
        return result

    async def update_feed_with_filter_group(
        self,
        db: AsyncSession,
        feed_id: str,
        user_id: str,
        feed_patch: Optional[FeedPatch] = None,
        filter_group: Optional[FilterGroupInput] = None,
    ) -> FeedWithFilterGroupResult:
        """
        Patch a feed and replace the child filter collections that are given.

        If the feed has no filter group yet and `filter_group` is given,
        one is created.

        Raises:
            FeedNotFoundError: If the feed is missing, inactive, or owned by
                another user. Raised before anything is written.
        """
        if filter_group is not None:
            validate_filter_group(filter_group)

        feed_row = await personalized_feeds_repository.find_active_by_id_for_user(
            db, feed_id, user_id
        )
        if feed_row is None:
            raise FeedNotFoundError(feed_id, user_id)

        try:
            patch = feed_patch.to_patch() if feed_patch is not None else {}
            feed_row = await personalized_feeds_repository.update(db, feed_row, patch)

            group_row: Optional[FeedFilterGroup] = None
            groups = await feed_filters_repository.find_groups_by_feed_id(db, feed_id)
            if groups:
                group_row = groups[0]

            if filter_group is not None:
                if group_row is None:
                    group_row = await feed_filters_repository.create_group(
                        db,
                        feed_id=feed_id,
                        name=filter_group.name or feed_row.name,
                        logic_type=filter_group.logic_type or DEFAULT_LOGIC_TYPE,
                    )
                else:
                    group_row = await feed_filters_repository.update_group(
                        db,
                        group_row,
                        name=filter_group.name,
                        logic_type=filter_group.logic_type,
                    )
                await self._replace_child_filters(db, group_row, filter_group)

            await db.commit()

        except Exception as e:
            await db.rollback()
            logger.error(
                "Failed to update feed with filter group",
                feed_id=feed_id,
                user_id=user_id,
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info("Updated feed with filter group", feed_id=feed_id, user_id=user_id)
        return await self.load_feed_with_filter_group(db, feed_row, group_row)

    async def load_feed_with_filter_group(
        self,
        db: AsyncSession,
        feed: PersonalizedFeed,
        group: Optional[FeedFilterGroup] = None,
    ) -> FeedWithFilterGroupResult:
        """Read back a feed's first filter group and its children."""
        if group is None:
            groups = await feed_filters_repository.find_groups_by_feed_id(db, feed.id)
            group = groups[0] if groups else None
        if group is None:
            return FeedWithFilterGroupResult(feed=feed)

        group_ids = [group.id]
        return FeedWithFilterGroupResult(
            feed=feed,
            filter_group=group,
            tag_filters=await feed_filters_repository.find_tag_filters_by_group_ids(db, group_ids),
            author_filters=await feed_filters_repository.find_author_filters_by_group_ids(
                db, group_ids
            ),
            date_range_filters=await feed_filters_repository.find_date_range_filters_by_group_ids(
                db, group_ids
            ),
            likes_count_filters=await feed_filters_repository.find_likes_count_filters_by_group_ids(
                db, group_ids
            ),
        )

    async def _replace_child_filters(
        self,
        db: AsyncSession,
        group: FeedFilterGroup,
        filter_group: FilterGroupInput,
    ) -> None:
        if filter_group.tag_filters is not None:
            await feed_filters_repository.delete_tag_filters_by_group_id(db, group.id)
            await feed_filters_repository.create_tag_filters(db, group.id, filter_group.tag_filters)

        if filter_group.author_filters is not None:
            await feed_filters_repository.delete_author_filters_by_group_id(db, group.id)
            await feed_filters_repository.create_author_filters(
                db, group.id, filter_group.author_filters
            )

        if filter_group.date_range_filters is not None:
            await feed_filters_repository.delete_date_range_filters_by_group_id(db, group.id)
            await feed_filters_repository.create_date_range_filters(
                db, group.id, filter_group.date_range_filters
            )

        if filter_group.likes_count_filters is not None:
            await feed_filters_repository.delete_likes_count_filters_by_group_id(db, group.id)
            await feed_filters_repository.create_likes_count_filters(
                db, group.id, filter_group.likes_count_filters
            )


feed_transaction_manager = FeedTransactionManager()
