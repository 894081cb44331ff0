"""
Pydantic Schemas for API Request/Response Models

Following official Pydantic V2 documentation:
https://docs.pydantic.dev/latest/
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class LogicTypeEnum(str, Enum):
    """How filters within a group are combined."""
    AND = "AND"
    OR = "OR"


class AttemptStatusEnum(str, Enum):
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


# =============================================================================
# Base Schemas
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        populate_by_name=True,
        use_enum_values=True,
    )


# =============================================================================
# Filter Schemas
# =============================================================================

class TagFilterSchema(BaseSchema):
    tag_name: str = Field(..., min_length=1, max_length=255)


class AuthorFilterSchema(BaseSchema):
    author_id: str = Field(..., min_length=1, max_length=255)


class DateRangeFilterSchema(BaseSchema):
    days_ago: int = Field(..., ge=1)


class LikesCountFilterSchema(BaseSchema):
    min_likes: int = Field(..., ge=0)


class FilterGroupRequest(BaseSchema):
    """
    Filter group in create/update requests.

    On update, a list that is present replaces the stored filters of that
    kind; an omitted list leaves them unchanged.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logic_type: Optional[LogicTypeEnum] = None
    tag_filters: Optional[List[TagFilterSchema]] = None
    author_filters: Optional[List[AuthorFilterSchema]] = None
    date_range_filters: Optional[List[DateRangeFilterSchema]] = None
    likes_count_filters: Optional[List[LikesCountFilterSchema]] = None


class TagFilterResponse(BaseSchema):
    id: str
    tag_name: str
    created_at: datetime


class AuthorFilterResponse(BaseSchema):
    id: str
    author_id: str
    created_at: datetime


class DateRangeFilterResponse(BaseSchema):
    id: str
    days_ago: int
    created_at: datetime


class LikesCountFilterResponse(BaseSchema):
    id: str
    min_likes: int
    created_at: datetime


class FilterGroupResponse(BaseSchema):
    id: str
    feed_id: str
    name: str
    logic_type: LogicTypeEnum
    tag_filters: List[TagFilterResponse] = []
    author_filters: List[AuthorFilterResponse] = []
    date_range_filters: List[DateRangeFilterResponse] = []
    likes_count_filters: List[LikesCountFilterResponse] = []
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Personalized Feed Schemas
# =============================================================================

class CreatePersonalizedFeedRequest(BaseSchema):
    """Only the first entry of `filter_groups` is used."""
    name: str = Field(..., min_length=1, max_length=255)
    data_source: str = Field(default="qiita", min_length=1, max_length=50)
    filter_config: Dict[str, Any] = Field(default_factory=dict)
    delivery_config: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True
    filter_groups: List[FilterGroupRequest] = Field(default_factory=list)


class UpdatePersonalizedFeedRequest(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    data_source: Optional[str] = Field(None, min_length=1, max_length=50)
    filter_config: Optional[Dict[str, Any]] = None
    delivery_config: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    filter_groups: Optional[List[FilterGroupRequest]] = None


class PersonalizedFeedResponse(BaseSchema):
    id: str
    user_id: str
    name: str
    data_source: str
    filter_config: Dict[str, Any]
    delivery_config: Dict[str, Any]
    is_active: bool
    filter_groups: List[FilterGroupResponse] = []
    created_at: datetime
    updated_at: datetime


class PersonalizedFeedsListResponse(BaseSchema):
    feeds: List[PersonalizedFeedResponse]
    total: int
    page: int
    per_page: int


class DeletePersonalizedFeedResponse(BaseSchema):
    id: str
    deleted: bool = True


# =============================================================================
# Program Attempt Schemas
# =============================================================================

class ProgramAttemptResponse(BaseSchema):
    id: str
    user_id: str
    feed_id: str
    status: AttemptStatusEnum
    reason: Optional[str] = None
    post_count: int
    program_id: Optional[str] = None
    created_at: datetime


class ProgramAttemptsResponse(BaseSchema):
    attempts: List[ProgramAttemptResponse]
    total_count: int
    current_page: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class ProgramAttemptStatisticsResponse(BaseSchema):
    total_attempts: int
    success_count: int
    skipped_count: int
    failed_count: int
    success_rate: float
    last_attempt_date: Optional[datetime] = None
    last_success_date: Optional[datetime] = None


# =============================================================================
# User Settings Schemas
# =============================================================================

class UserSettingsResponse(BaseSchema):
    user_id: str
    display_name: str
    slack_webhook_url: Optional[str] = None
    notification_enabled: bool
    rss_enabled: bool
    rss_token: Optional[str] = None
    rss_url: Optional[str] = None
    updated_at: Optional[datetime] = None


class UpdateUserSettingsRequest(BaseSchema):
    """An empty `slack_webhook_url` clears the webhook."""
    display_name: Optional[str] = Field(None, min_length=1, max_length=50)
    slack_webhook_url: Optional[str] = None
    notification_enabled: Optional[bool] = None
    rss_enabled: Optional[bool] = None


class RegenerateRssTokenResponse(BaseSchema):
    rss_token: str
    rss_url: str
    updated_at: Optional[datetime] = None


class TestSlackWebhookRequest(BaseSchema):
    webhook_url: str = Field(..., min_length=1)


class TestSlackWebhookResponse(BaseSchema):
    success: bool
    error_message: Optional[str] = None
    response_time: int


# =============================================================================
# Subscription Schemas
# =============================================================================

class PlanLimitsResponse(BaseSchema):
    max_feeds: int
    max_authors: int
    max_tags: int


class SubscriptionUsageResponse(BaseSchema):
    feeds: int
    authors: int
    tags: int


class SubscriptionResponse(BaseSchema):
    plan_id: Optional[str] = None
    plan_name: str
    status: str
    limits: PlanLimitsResponse
    usage: SubscriptionUsageResponse
    show_upgrade_button: bool


# =============================================================================
# Qiita Schemas
# =============================================================================

class QiitaPostResponse(BaseSchema):
    id: str
    title: str
    url: str
    created_at: datetime
    updated_at: datetime
    likes_count: int
    stocks_count: int
    comments_count: int
    tags: List[str]
    author_id: str
    author_name: str


class QiitaPostsSearchResponse(BaseSchema):
    posts: List[QiitaPostResponse]
    total_count: int
    page: int
    per_page: int


# =============================================================================
# Dashboard Schemas
# =============================================================================

class DashboardStatsResponse(BaseSchema):
    active_feeds_count: int
    monthly_episodes_count: int
    total_program_duration: str = Field(description='Formatted total, e.g. "45m" or "2.5h"')


class ProgramSummaryResponse(BaseSchema):
    id: str
    title: str
    feed_id: str
    feed_name: str
    audio_url: str
    audio_duration: int
    image_url: Optional[str] = None
    posts_count: int
    expires_at: Optional[datetime] = None
    is_expired: bool
    created_at: datetime


class ProgramsListResponse(BaseSchema):
    programs: List[ProgramSummaryResponse]
    total_count: int
    limit: int
    offset: int
    has_next: bool


class ProgramChapterResponse(BaseSchema):
    title: str
    start_time: int
    end_time: int


class ProgramPostResponse(BaseSchema):
    id: str
    title: str
    url: str
    author_id: str
    author_name: str
    likes_count: int
    stocks_count: int
    summary: Optional[str] = None
    private: bool
    created_at: datetime


class ProgramDetailResponse(BaseSchema):
    id: str
    title: str
    feed_id: str
    feed_name: str
    audio_url: str
    audio_duration: int
    image_url: Optional[str] = None
    script: Dict[str, Any] = {}
    chapters: List[ProgramChapterResponse] = []
    posts: List[ProgramPostResponse] = []
    expires_at: Optional[datetime] = None
    is_expired: bool
    created_at: datetime
    updated_at: datetime


class HistoryFeedResponse(BaseSchema):
    id: str
    name: str


class HistoryProgramResponse(BaseSchema):
    id: str
    title: str


class GenerationHistoryItemResponse(BaseSchema):
    id: str
    created_at: datetime
    status: AttemptStatusEnum
    reason: Optional[str] = None
    post_count: int
    feed: HistoryFeedResponse
    program: Optional[HistoryProgramResponse] = None


class GenerationHistoryResponse(BaseSchema):
    history: List[GenerationHistoryItemResponse]
    total_count: int
    limit: int
    offset: int
    has_next: bool


# =============================================================================
# Webhook Schemas
# =============================================================================

class WebhookAckResponse(BaseSchema):
    received: bool = True
    event_type: str
