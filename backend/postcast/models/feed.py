"""
Personalized Feed Models

A personalized feed owns filter groups, and each group owns four kinds
of child filters (tag, author, date range, likes count).
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, TIMESTAMP, Boolean, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from postcast.db.connection import Base
from postcast.models.common import generate_id, utcnow


class PersonalizedFeed(Base):
    """
    A user's named feed configuration.

    Feeds are never hard-deleted; `is_active` is flipped instead.
    """

    __tablename__ = "personalized_feeds"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("app_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    data_source: Mapped[str] = mapped_column(String(50), nullable=False, default="qiita")
    filter_config: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    delivery_config: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<PersonalizedFeed(id={self.id}, name='{self.name}', active={self.is_active})>"


class FeedFilterGroup(Base):
    """Named set of filters combined with AND/OR logic."""

    __tablename__ = "feed_filter_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    feed_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("personalized_feeds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    logic_type: Mapped[str] = mapped_column(String(3), nullable=False, default="OR")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<FeedFilterGroup(id={self.id}, feed_id={self.feed_id}, logic={self.logic_type})>"


class TagFilter(Base):
    __tablename__ = "tag_filters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feed_filter_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class AuthorFilter(Base):
    __tablename__ = "author_filters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feed_filter_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class DateRangeFilter(Base):
    """Only posts published within the last `days_ago` days match."""

    __tablename__ = "date_range_filters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feed_filter_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    days_ago: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


class LikesCountFilter(Base):
    """Only posts with at least `min_likes` likes match."""

    __tablename__ = "likes_count_filters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    group_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("feed_filter_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    min_likes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
