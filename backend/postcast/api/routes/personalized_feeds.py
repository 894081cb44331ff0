"""
Personalized Feed API Routes

CRUD endpoints for personalized feeds and their filter groups, plus
program attempt history per feed.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.api.middleware import get_current_user_id
from postcast.api.schemas import (
    AuthorFilterResponse,
    CreatePersonalizedFeedRequest,
    DateRangeFilterResponse,
    DeletePersonalizedFeedResponse,
    FilterGroupRequest,
    FilterGroupResponse,
    LikesCountFilterResponse,
    PersonalizedFeedResponse,
    PersonalizedFeedsListResponse,
    ProgramAttemptResponse,
    ProgramAttemptsResponse,
    ProgramAttemptStatisticsResponse,
    TagFilterResponse,
    UpdatePersonalizedFeedRequest,
)
from postcast.config.logging import get_logger
from postcast.db import get_db_session
from postcast.services.feeds import (
    FeedInput,
    FeedPatch,
    FeedWithFilterGroupResult,
    FilterGroupInput,
    personalized_feeds_service,
)
from postcast.services.programs import program_attempts_service

logger = get_logger(__name__)

router = APIRouter(prefix="/personalized-feeds", tags=["Personalized Feeds"])


def to_filter_group_input(group: FilterGroupRequest) -> FilterGroupInput:
    """Convert a request group, keeping None (untouched) distinct from []."""
    return FilterGroupInput(
        name=group.name,
        logic_type=group.logic_type,
        tag_filters=(
            [f.tag_name for f in group.tag_filters] if group.tag_filters is not None else None
        ),
        author_filters=(
            [f.author_id for f in group.author_filters] if group.author_filters is not None else None
        ),
        date_range_filters=(
            [f.days_ago for f in group.date_range_filters]
            if group.date_range_filters is not None
            else None
        ),
        likes_count_filters=(
            [f.min_likes for f in group.likes_count_filters]
            if group.likes_count_filters is not None
            else None
        ),
    )


def to_feed_response(result: FeedWithFilterGroupResult) -> PersonalizedFeedResponse:
    feed = result.feed
    groups = []
    if result.filter_group is not None:
        group = result.filter_group
        groups.append(
            FilterGroupResponse(
                id=group.id,
                feed_id=group.feed_id,
                name=group.name,
                logic_type=group.logic_type,
                tag_filters=[TagFilterResponse.model_validate(f) for f in result.tag_filters],
                author_filters=[AuthorFilterResponse.model_validate(f) for f in result.author_filters],
                date_range_filters=[
                    DateRangeFilterResponse.model_validate(f) for f in result.date_range_filters
                ],
                likes_count_filters=[
                    LikesCountFilterResponse.model_validate(f) for f in result.likes_count_filters
                ],
                created_at=group.created_at,
                updated_at=group.updated_at,
            )
        )
    return PersonalizedFeedResponse(
        id=feed.id,
        user_id=feed.user_id,
        name=feed.name,
        data_source=feed.data_source,
        filter_config=feed.filter_config or {},
        delivery_config=feed.delivery_config or {},
        is_active=feed.is_active,
        filter_groups=groups,
        created_at=feed.created_at,
        updated_at=feed.updated_at,
    )


@router.get("", response_model=PersonalizedFeedsListResponse)
async def list_personalized_feeds(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    include_filters: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PersonalizedFeedsListResponse:
    """
    List the user's active feeds, most recently updated first.

    Filter groups are only loaded when `include_filters` is true.
    """
    result = await personalized_feeds_service.find_by_user_id(
        db, user_id, page=page, per_page=per_page, include_filters=include_filters
    )
    return PersonalizedFeedsListResponse(
        feeds=[to_feed_response(feed) for feed in result.feeds],
        total=result.total,
        page=result.page,
        per_page=result.per_page,
    )


@router.get("/{feed_id}", response_model=PersonalizedFeedResponse)
async def get_personalized_feed(
    feed_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PersonalizedFeedResponse:
    result = await personalized_feeds_service.find_by_id(db, feed_id, user_id)
    return to_feed_response(result)


@router.post("", response_model=PersonalizedFeedResponse, status_code=status.HTTP_201_CREATED)
async def create_personalized_feed(
    request: CreatePersonalizedFeedRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PersonalizedFeedResponse:
    """
    Create a feed with its filter group.

    Rejected with 403 when the subscription quotas would be exceeded.
    """
    filter_group = (
        to_filter_group_input(request.filter_groups[0])
        if request.filter_groups
        else FilterGroupInput()
    )
    feed = FeedInput(
        user_id=user_id,
        name=request.name,
        data_source=request.data_source,
        filter_config=request.filter_config,
        delivery_config=request.delivery_config,
        is_active=request.is_active,
    )

    result = await personalized_feeds_service.create(db, feed, filter_group)
    return to_feed_response(result)


@router.patch("/{feed_id}", response_model=PersonalizedFeedResponse)
async def update_personalized_feed(
    feed_id: str,
    request: UpdatePersonalizedFeedRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> PersonalizedFeedResponse:
    """Patch feed fields and replace the filter collections that are given."""
    filter_group = (
        to_filter_group_input(request.filter_groups[0]) if request.filter_groups else None
    )
    patch = FeedPatch(
        name=request.name,
        data_source=request.data_source,
        filter_config=request.filter_config,
        delivery_config=request.delivery_config,
        is_active=request.is_active,
    )

    result = await personalized_feeds_service.update(
        db,
        feed_id,
        user_id,
        feed_patch=patch,
        filter_group=filter_group,
    )
    return to_feed_response(result)


@router.delete("/{feed_id}", response_model=DeletePersonalizedFeedResponse)
async def delete_personalized_feed(
    feed_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> DeletePersonalizedFeedResponse:
    await personalized_feeds_service.delete(db, feed_id, user_id)
    return DeletePersonalizedFeedResponse(id=feed_id)


@router.get("/{feed_id}/attempts", response_model=ProgramAttemptsResponse)
async def list_program_attempts(
    feed_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProgramAttemptsResponse:
    """Program generation history of a feed, newest first."""
    result = await program_attempts_service.find_by_feed_id(
        db, user_id, feed_id, page=page, limit=limit
    )
    return ProgramAttemptsResponse(
        attempts=[ProgramAttemptResponse.model_validate(a) for a in result.attempts],
        total_count=result.total_count,
        current_page=result.page,
        total_pages=result.total_pages,
        has_next_page=result.has_next_page,
        has_previous_page=result.has_previous_page,
    )


@router.get("/{feed_id}/attempts/statistics", response_model=ProgramAttemptStatisticsResponse)
async def get_program_attempt_statistics(
    feed_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProgramAttemptStatisticsResponse:
    stats = await program_attempts_service.get_statistics(db, user_id, feed_id)
    return ProgramAttemptStatisticsResponse.model_validate(stats)
