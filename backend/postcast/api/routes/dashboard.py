"""
Dashboard API Routes

Summary statistics, the generated programs of the current user and the
generation history across their feeds.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.api.middleware import get_current_user_id
from postcast.api.schemas import (
    DashboardStatsResponse,
    GenerationHistoryItemResponse,
    GenerationHistoryResponse,
    HistoryFeedResponse,
    HistoryProgramResponse,
    ProgramChapterResponse,
    ProgramDetailResponse,
    ProgramPostResponse,
    ProgramsListResponse,
    ProgramSummaryResponse,
)
from postcast.db import get_db_session
from postcast.repositories import AttemptHistoryRow, ProgramSummaryRow
from postcast.services.dashboard import ProgramDetail, dashboard_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def to_program_summary(row: ProgramSummaryRow) -> ProgramSummaryResponse:
    program = row.program
    return ProgramSummaryResponse(
        id=program.id,
        title=program.title,
        feed_id=program.feed_id,
        feed_name=row.feed_name,
        audio_url=program.audio_url,
        audio_duration=program.audio_duration,
        image_url=program.image_url,
        posts_count=row.posts_count,
        expires_at=program.expires_at,
        is_expired=program.is_expired,
        created_at=program.created_at,
    )


def to_program_detail(detail: ProgramDetail) -> ProgramDetailResponse:
    program = detail.program
    return ProgramDetailResponse(
        id=program.id,
        title=program.title,
        feed_id=program.feed_id,
        feed_name=detail.feed.name,
        audio_url=program.audio_url,
        audio_duration=program.audio_duration,
        image_url=program.image_url,
        script=program.script or {},
        chapters=[ProgramChapterResponse.model_validate(c) for c in program.chapters or []],
        posts=[
            ProgramPostResponse(
                id=post.post_id,
                title=post.title,
                url=post.url,
                author_id=post.author_id,
                author_name=post.author_name,
                likes_count=post.likes_count,
                stocks_count=post.stocks_count,
                summary=post.summary,
                private=post.private,
                created_at=post.created_at,
            )
            for post in detail.posts
        ],
        expires_at=program.expires_at,
        is_expired=program.is_expired,
        created_at=program.created_at,
        updated_at=program.updated_at,
    )


def to_history_item(row: AttemptHistoryRow) -> GenerationHistoryItemResponse:
    attempt = row.attempt
    program = None
    if attempt.program_id is not None and row.program_title is not None:
        program = HistoryProgramResponse(id=attempt.program_id, title=row.program_title)
    return GenerationHistoryItemResponse(
        id=attempt.id,
        created_at=attempt.created_at,
        status=attempt.status,
        reason=attempt.reason,
        post_count=attempt.post_count,
        feed=HistoryFeedResponse(id=attempt.feed_id, name=row.feed_name),
        program=program,
    )


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> DashboardStatsResponse:
    """Active feeds, episodes this month (JST) and total program duration."""
    stats = await dashboard_service.get_stats(db, user_id)
    return DashboardStatsResponse(
        active_feeds_count=stats.active_feeds_count,
        monthly_episodes_count=stats.monthly_episodes_count,
        total_program_duration=stats.total_program_duration,
    )


@router.get("/personalized-programs", response_model=ProgramsListResponse)
async def list_personalized_programs(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProgramsListResponse:
    page = await dashboard_service.get_personalized_programs(
        db, user_id, limit=limit, offset=offset
    )
    return ProgramsListResponse(
        programs=[to_program_summary(row) for row in page.programs],
        total_count=page.total_count,
        limit=page.limit,
        offset=page.offset,
        has_next=page.has_next,
    )


@router.get("/personalized-programs/{program_id}", response_model=ProgramDetailResponse)
async def get_personalized_program(
    program_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> ProgramDetailResponse:
    detail = await dashboard_service.get_program_detail(db, user_id, program_id)
    return to_program_detail(detail)


@router.get("/program-generation-history", response_model=GenerationHistoryResponse)
async def get_program_generation_history(
    feed_id: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> GenerationHistoryResponse:
    """Generation attempts across the user's feeds, optionally for one feed."""
    page = await dashboard_service.get_generation_history(
        db, user_id, feed_id=feed_id, limit=limit, offset=offset
    )
    return GenerationHistoryResponse(
        history=[to_history_item(row) for row in page.history],
        total_count=page.total_count,
        limit=page.limit,
        offset=page.offset,
        has_next=page.has_next,
    )
