"""
Personalized Feeds Repository

Data access for feeds, their filter groups and the four child filter
tables. None of these methods commit; transaction boundaries belong
to the calling service.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.models import (
    AuthorFilter,
    DateRangeFilter,
    FeedFilterGroup,
    LikesCountFilter,
    PersonalizedFeed,
    TagFilter,
)
from postcast.models.common import utcnow

logger = get_logger(__name__)

# Scalar columns a caller may patch on an existing feed
UPDATABLE_FEED_FIELDS = ("name", "data_source", "filter_config", "delivery_config", "is_active")


class PersonalizedFeedsRepository:
    """Data access for PersonalizedFeed rows."""

    async def find_by_id(self, db: AsyncSession, feed_id: str) -> Optional[PersonalizedFeed]:
        result = await db.execute(
            select(PersonalizedFeed).where(PersonalizedFeed.id == feed_id)
        )
        return result.scalar_one_or_none()

    async def find_active_by_id_for_user(
        self,
        db: AsyncSession,
        feed_id: str,
        user_id: str,
    ) -> Optional[PersonalizedFeed]:
        """Return the feed only if it is active and owned by `user_id`."""
        result = await db.execute(
            select(PersonalizedFeed).where(
                PersonalizedFeed.id == feed_id,
                PersonalizedFeed.user_id == user_id,
                PersonalizedFeed.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def find_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[PersonalizedFeed], int]:
        """
        Page through a user's active feeds, most recently updated first.

        Returns:
            Tuple of (feeds on this page, total active feeds).
        """
        total = await self.count_active_by_user_id(db, user_id)
        result = await db.execute(
            select(PersonalizedFeed)
            .where(
                PersonalizedFeed.user_id == user_id,
                PersonalizedFeed.is_active.is_(True),
            )
            .order_by(PersonalizedFeed.updated_at.desc(), PersonalizedFeed.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return list(result.scalars().all()), total

    async def count_active_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        exclude_id: Optional[str] = None,
    ) -> int:
        query = select(func.count(PersonalizedFeed.id)).where(
            PersonalizedFeed.user_id == user_id,
            PersonalizedFeed.is_active.is_(True),
        )
        if exclude_id is not None:
            query = query.where(PersonalizedFeed.id != exclude_id)
        result = await db.execute(query)
        return result.scalar_one()

    async def create(self, db: AsyncSession, **attrs: Any) -> PersonalizedFeed:
        feed = PersonalizedFeed(**attrs)
        db.add(feed)
        await db.flush()
        return feed

    async def update(
        self,
        db: AsyncSession,
        feed: PersonalizedFeed,
        patch: Dict[str, Any],
    ) -> PersonalizedFeed:
        """Apply the keys of `patch` that name updatable columns."""
        for field_name in UPDATABLE_FEED_FIELDS:
            if field_name in patch:
                setattr(feed, field_name, patch[field_name])
        feed.updated_at = utcnow()
        await db.flush()
        return feed

    async def soft_delete(self, db: AsyncSession, feed_id: str, user_id: str) -> bool:
        """
        Deactivate an active feed owned by `user_id` in a single statement.

        Returns:
            True if a row was deactivated.
        """
        result = await db.execute(
            update(PersonalizedFeed)
            .where(
                PersonalizedFeed.id == feed_id,
                PersonalizedFeed.user_id == user_id,
                PersonalizedFeed.is_active.is_(True),
            )
            .values(is_active=False, updated_at=utcnow())
        )
        return result.rowcount > 0


class FeedFiltersRepository:
    """Data access for filter groups and their child filters."""

    # -------------------------------------------------------------------------
    # Filter groups
    # -------------------------------------------------------------------------

    async def find_groups_by_feed_id(
        self,
        db: AsyncSession,
        feed_id: str,
    ) -> List[FeedFilterGroup]:
        result = await db.execute(
            select(FeedFilterGroup)
            .where(FeedFilterGroup.feed_id == feed_id)
            .order_by(FeedFilterGroup.created_at, FeedFilterGroup.id)
        )
        return list(result.scalars().all())

    async def find_groups_by_feed_ids(
        self,
        db: AsyncSession,
        feed_ids: Sequence[str],
    ) -> List[FeedFilterGroup]:
        if not feed_ids:
            return []
        result = await db.execute(
            select(FeedFilterGroup)
            .where(FeedFilterGroup.feed_id.in_(feed_ids))
            .order_by(FeedFilterGroup.created_at, FeedFilterGroup.id)
        )
        return list(result.scalars().all())

    async def create_group(
        self,
        db: AsyncSession,
        feed_id: str,
        name: str,
        logic_type: str = "OR",
    ) -> FeedFilterGroup:
        group = FeedFilterGroup(feed_id=feed_id, name=name, logic_type=logic_type)
        db.add(group)
        await db.flush()
        return group

    async def update_group(
        self,
        db: AsyncSession,
        group: FeedFilterGroup,
        name: Optional[str] = None,
        logic_type: Optional[str] = None,
    ) -> FeedFilterGroup:
        if name is not None:
            group.name = name
        if logic_type is not None:
            group.logic_type = logic_type
        group.updated_at = utcnow()
        await db.flush()
        return group

    # -------------------------------------------------------------------------
    # Tag filters
    # -------------------------------------------------------------------------

    async def create_tag_filters(
        self,
        db: AsyncSession,
        group_id: str,
        tag_names: Iterable[str],
    ) -> List[TagFilter]:
        rows = [TagFilter(group_id=group_id, tag_name=name) for name in tag_names]
        return await self._add_all(db, rows)

    async def delete_tag_filters_by_group_id(self, db: AsyncSession, group_id: str) -> int:
        return await self._delete_by_group_id(db, TagFilter, group_id)

    async def find_tag_filters_by_group_ids(
        self,
        db: AsyncSession,
        group_ids: Sequence[str],
    ) -> List[TagFilter]:
        return await self._find_by_group_ids(db, TagFilter, group_ids)

    # -------------------------------------------------------------------------
    # Author filters
    # -------------------------------------------------------------------------

    async def create_author_filters(
        self,
        db: AsyncSession,
        group_id: str,
        author_ids: Iterable[str],
    ) -> List[AuthorFilter]:
        rows = [AuthorFilter(group_id=group_id, author_id=author_id) for author_id in author_ids]
        return await self._add_all(db, rows)

    async def delete_author_filters_by_group_id(self, db: AsyncSession, group_id: str) -> int:
        return await self._delete_by_group_id(db, AuthorFilter, group_id)

    async def find_author_filters_by_group_ids(
        self,
        db: AsyncSession,
        group_ids: Sequence[str],
    ) -> List[AuthorFilter]:
        return await self._find_by_group_ids(db, AuthorFilter, group_ids)

    # -------------------------------------------------------------------------
    # Date range filters
    # -------------------------------------------------------------------------

    async def create_date_range_filters(
        self,
        db: AsyncSession,
        group_id: str,
        days_ago_values: Iterable[int],
    ) -> List[DateRangeFilter]:
        rows = [DateRangeFilter(group_id=group_id, days_ago=days) for days in days_ago_values]
        return await self._add_all(db, rows)

    async def delete_date_range_filters_by_group_id(self, db: AsyncSession, group_id: str) -> int:
        return await self._delete_by_group_id(db, DateRangeFilter, group_id)

    async def find_date_range_filters_by_group_ids(
        self,
        db: AsyncSession,
        group_ids: Sequence[str],
    ) -> List[DateRangeFilter]:
        return await self._find_by_group_ids(db, DateRangeFilter, group_ids)

    # -------------------------------------------------------------------------
    # Likes count filters
    # -------------------------------------------------------------------------

    async def create_likes_count_filters(
        self,
        db: AsyncSession,
        group_id: str,
        min_likes_values: Iterable[int],
    ) -> List[LikesCountFilter]:
        rows = [LikesCountFilter(group_id=group_id, min_likes=likes) for likes in min_likes_values]
        return await self._add_all(db, rows)

    async def delete_likes_count_filters_by_group_id(self, db: AsyncSession, group_id: str) -> int:
        return await self._delete_by_group_id(db, LikesCountFilter, group_id)

    async def find_likes_count_filters_by_group_ids(
        self,
        db: AsyncSession,
        group_ids: Sequence[str],
    ) -> List[LikesCountFilter]:
        return await self._find_by_group_ids(db, LikesCountFilter, group_ids)

    # -------------------------------------------------------------------------
    # Usage counters
    # -------------------------------------------------------------------------

    async def count_filters_by_user_id(self, db: AsyncSession, user_id: str) -> Dict[str, int]:
        """Count tag and author filters across all active feeds of a user."""
        counts: Dict[str, int] = {}
        for key, model in (("tags", TagFilter), ("authors", AuthorFilter)):
            result = await db.execute(
                select(func.count(model.id))
                .join(FeedFilterGroup, FeedFilterGroup.id == model.group_id)
                .join(PersonalizedFeed, PersonalizedFeed.id == FeedFilterGroup.feed_id)
                .where(
                    PersonalizedFeed.user_id == user_id,
                    PersonalizedFeed.is_active.is_(True),
                )
            )
            counts[key] = result.scalar_one()
        return counts

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _add_all(self, db: AsyncSession, rows: List[Any]) -> List[Any]:
        if rows:
            db.add_all(rows)
            await db.flush()
        return rows

    async def _delete_by_group_id(self, db: AsyncSession, model: Any, group_id: str) -> int:
        result = await db.execute(delete(model).where(model.group_id == group_id))
        return result.rowcount

    async def _find_by_group_ids(
        self,
        db: AsyncSession,
        model: Any,
        group_ids: Sequence[str],
    ) -> List[Any]:
        if not group_ids:
            return []
        result = await db.execute(
            select(model)
            .where(model.group_id.in_(group_ids))
            .order_by(model.created_at, model.id)
        )
        return list(result.scalars().all())


personalized_feeds_repository = PersonalizedFeedsRepository()
feed_filters_repository = FeedFiltersRepository()
