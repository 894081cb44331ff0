"""
Feed Service Types

Plain dataclasses passed between the API layer and the feed services.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from postcast.models import (
    AuthorFilter,
    DateRangeFilter,
    FeedFilterGroup,
    LikesCountFilter,
    PersonalizedFeed,
    TagFilter,
)

LOGIC_TYPES = ("AND", "OR")


@dataclass
class FeedInput:
    """Attributes of a feed to create."""
    user_id: str
    name: str
    data_source: str = "qiita"
    filter_config: Dict[str, Any] = field(default_factory=dict)
    delivery_config: Dict[str, Any] = field(default_factory=dict)
    is_active: bool = True

    def to_attrs(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "data_source": self.data_source,
            "filter_config": self.filter_config,
            "delivery_config": self.delivery_config,
            "is_active": self.is_active,
        }


@dataclass
class FeedPatch:
    """Scalar feed fields to change. None means "leave unchanged"."""
    name: Optional[str] = None
    data_source: Optional[str] = None
    filter_config: Optional[Dict[str, Any]] = None
    delivery_config: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

    def to_patch(self) -> Dict[str, Any]:
        return {
            key: value
            for key, value in (
                ("name", self.name),
                ("data_source", self.data_source),
                ("filter_config", self.filter_config),
                ("delivery_config", self.delivery_config),
                ("is_active", self.is_active),
            )
            if value is not None
        }


@dataclass
class FilterGroupInput:
    """
    A filter group with its child filters.

    Used for creation, and for updates where every collection that is
    not None replaces the stored one. An empty list clears it.
    """
    name: Optional[str] = None
    logic_type: Optional[str] = None
    tag_filters: Optional[List[str]] = None
    author_filters: Optional[List[str]] = None
    date_range_filters: Optional[List[int]] = None
    likes_count_filters: Optional[List[int]] = None

    @property
    def tag_count(self) -> int:
        return len(self.tag_filters or [])

    @property
    def author_count(self) -> int:
        return len(self.author_filters or [])


@dataclass
class FeedWithFilterGroupResult:
    """Persisted state of a feed and its single filter group."""
    feed: PersonalizedFeed
    filter_group: Optional[FeedFilterGroup] = None
    tag_filters: List[TagFilter] = field(default_factory=list)
    author_filters: List[AuthorFilter] = field(default_factory=list)
    date_range_filters: List[DateRangeFilter] = field(default_factory=list)
    likes_count_filters: List[LikesCountFilter] = field(default_factory=list)
