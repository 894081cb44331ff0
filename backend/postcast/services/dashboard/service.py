"""
Dashboard Service

Read models for the user dashboard: headline statistics, the program
list and detail, and program generation history across feeds.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import FeedNotFoundError, ProgramNotFoundError
from postcast.models import PersonalizedFeed, PersonalizedProgram, PersonalizedProgramPost
from postcast.models.common import JST, utcnow
from postcast.repositories import (
    AttemptHistoryRow,
    ProgramSummaryRow,
    app_users_repository,
    personalized_feeds_repository,
    personalized_programs_repository,
    program_attempts_repository,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    active_feeds_count: int
    monthly_episodes_count: int
    total_program_duration: str


@dataclass
class ProgramsPage:
    programs: List[ProgramSummaryRow] = field(default_factory=list)
    total_count: int = 0
    limit: int = 10
    offset: int = 0

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total_count


@dataclass(frozen=True)
class ProgramDetail:
    program: PersonalizedProgram
    feed: PersonalizedFeed
    posts: List[PersonalizedProgramPost]


@dataclass
class GenerationHistoryPage:
    history: List[AttemptHistoryRow] = field(default_factory=list)
    total_count: int = 0
    limit: int = 20
    offset: int = 0

    @property
    def has_next(self) -> bool:
        return self.offset + self.limit < self.total_count


def format_total_duration(duration_ms: int) -> str:
    """
    Human readable total listening time.

    Under an hour: whole minutes ("45m"). From an hour: whole hours, with
    ".5" added when 30 or more minutes remain ("12h", "12.5h").
    """
    total_minutes = max(duration_ms, 0) // 60000
    if total_minutes < 60:
        return f"{total_minutes}m"

    hours, minutes = divmod(total_minutes, 60)
    if minutes >= 30:
        return f"{hours}.5h"
    return f"{hours}h"


def jst_month_range(now: datetime) -> Tuple[datetime, datetime]:
    """UTC bounds [start, end) of the Japan-time calendar month containing `now`."""
    local = now.astimezone(JST)
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


class DashboardService:
    """Every method first requires an active user."""

    async def get_stats(
        self,
        db: AsyncSession,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> DashboardStats:
        await app_users_repository.find_active_by_id(db, user_id)

        month_start, month_end = jst_month_range(now or utcnow())
        stats = DashboardStats(
            active_feeds_count=await personalized_feeds_repository.count_active_by_user_id(
                db, user_id
            ),
            monthly_episodes_count=await personalized_programs_repository.count_created_between(
                db, user_id, month_start, month_end
            ),
            total_program_duration=format_total_duration(
                await personalized_programs_repository.sum_audio_duration(db, user_id)
            ),
        )

        logger.debug(
            "Dashboard stats computed",
            user_id=user_id,
            active_feeds_count=stats.active_feeds_count,
            monthly_episodes_count=stats.monthly_episodes_count,
        )
        return stats

    async def get_personalized_programs(
        self,
        db: AsyncSession,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> ProgramsPage:
        await app_users_repository.find_active_by_id(db, user_id)

        rows, total = await personalized_programs_repository.find_summaries_by_user_id(
            db, user_id, limit=limit, offset=offset
        )
        return ProgramsPage(programs=rows, total_count=total, limit=limit, offset=offset)

    async def get_program_detail(
        self,
        db: AsyncSession,
        user_id: str,
        program_id: str,
    ) -> ProgramDetail:
        """
        Raises:
            ProgramNotFoundError: If the program does not exist or belongs
                to another user.
        """
        await app_users_repository.find_active_by_id(db, user_id)

        found = await personalized_programs_repository.find_by_id_for_user(
            db, program_id, user_id
        )
        if found is None:
            logger.warning("Program not found", program_id=program_id, user_id=user_id)
            raise ProgramNotFoundError(program_id, user_id)

        program, feed = found
        posts = await personalized_programs_repository.find_posts_by_program_id(db, program.id)
        return ProgramDetail(program=program, feed=feed, posts=posts)

    async def get_generation_history(
        self,
        db: AsyncSession,
        user_id: str,
        feed_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> GenerationHistoryPage:
        """
        Attempts across the user's feeds, or one feed when `feed_id` is
        given. Inactive feeds the user owns are included.
        """
        await app_users_repository.find_active_by_id(db, user_id)

        if feed_id is not None:
            feed = await personalized_feeds_repository.find_by_id(db, feed_id)
            if feed is None or feed.user_id != user_id:
                raise FeedNotFoundError(feed_id, user_id)

        rows, total = await program_attempts_repository.find_history_by_user_id(
            db, user_id, feed_id=feed_id, limit=limit, offset=offset
        )
        return GenerationHistoryPage(history=rows, total_count=total, limit=limit, offset=offset)


dashboard_service = DashboardService()
