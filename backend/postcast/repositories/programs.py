"""
Personalized Programs and Program Attempts Repositories
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.models import (
    AttemptStatus,
    PersonalizedFeed,
    PersonalizedProgram,
    PersonalizedProgramAttempt,
    PersonalizedProgramPost,
)


@dataclass(frozen=True)
class ProgramSummaryRow:
    program: PersonalizedProgram
    feed_name: str
    posts_count: int


@dataclass(frozen=True)
class AttemptHistoryRow:
    attempt: PersonalizedProgramAttempt
    feed_name: str
    program_title: Optional[str]


class PersonalizedProgramsRepository:
    """Data access for PersonalizedProgram rows."""

    async def find_recent_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        limit: Optional[int] = 30,
    ) -> List[PersonalizedProgram]:
        """Most recent unexpired programs of a user, newest first."""
        result = await db.execute(
            select(PersonalizedProgram)
            .where(
                PersonalizedProgram.user_id == user_id,
                PersonalizedProgram.is_expired.is_(False),
            )
            .order_by(PersonalizedProgram.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def find_summaries_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> Tuple[List[ProgramSummaryRow], int]:
        """
        Page through every program of a user, expired ones included,
        newest first.

        Returns:
            Tuple of (rows on this page, total programs).
        """
        total = await db.scalar(
            select(func.count(PersonalizedProgram.id)).where(
                PersonalizedProgram.user_id == user_id
            )
        )

        posts_count = (
            select(func.count(PersonalizedProgramPost.id))
            .where(PersonalizedProgramPost.program_id == PersonalizedProgram.id)
            .correlate(PersonalizedProgram)
            .scalar_subquery()
        )
        result = await db.execute(
            select(PersonalizedProgram, PersonalizedFeed.name, posts_count)
            .join(PersonalizedFeed, PersonalizedFeed.id == PersonalizedProgram.feed_id)
            .where(PersonalizedProgram.user_id == user_id)
            .order_by(PersonalizedProgram.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [
            ProgramSummaryRow(program=program, feed_name=feed_name, posts_count=count)
            for program, feed_name, count in result.all()
        ]
        return rows, total or 0

    async def find_by_id_for_user(
        self,
        db: AsyncSession,
        program_id: str,
        user_id: str,
    ) -> Optional[Tuple[PersonalizedProgram, PersonalizedFeed]]:
        result = await db.execute(
            select(PersonalizedProgram, PersonalizedFeed)
            .join(PersonalizedFeed, PersonalizedFeed.id == PersonalizedProgram.feed_id)
            .where(
                PersonalizedProgram.id == program_id,
                PersonalizedProgram.user_id == user_id,
            )
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def find_posts_by_program_id(
        self,
        db: AsyncSession,
        program_id: str,
    ) -> List[PersonalizedProgramPost]:
        result = await db.execute(
            select(PersonalizedProgramPost)
            .where(PersonalizedProgramPost.program_id == program_id)
            .order_by(PersonalizedProgramPost.position)
        )
        return list(result.scalars().all())

    async def count_created_between(
        self,
        db: AsyncSession,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> int:
        """Programs created in the half-open range [start, end)."""
        count = await db.scalar(
            select(func.count(PersonalizedProgram.id)).where(
                PersonalizedProgram.user_id == user_id,
                PersonalizedProgram.created_at >= start,
                PersonalizedProgram.created_at < end,
            )
        )
        return count or 0

    async def sum_audio_duration(self, db: AsyncSession, user_id: str) -> int:
        """Total milliseconds of audio across programs that have an audio file."""
        total = await db.scalar(
            select(func.coalesce(func.sum(PersonalizedProgram.audio_duration), 0)).where(
                PersonalizedProgram.user_id == user_id,
                PersonalizedProgram.audio_url != "",
            )
        )
        return int(total or 0)


class ProgramAttemptsRepository:
    """Read access to the append-only attempt log."""

    async def find_by_feed_id(
        self,
        db: AsyncSession,
        feed_id: str,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[PersonalizedProgramAttempt], int]:
        """
        Page through the attempts of one feed, newest first.

        Returns:
            Tuple of (attempts on this page, total attempts).
        """
        count_result = await db.execute(
            select(func.count(PersonalizedProgramAttempt.id)).where(
                PersonalizedProgramAttempt.feed_id == feed_id
            )
        )
        total = count_result.scalar_one()

        result = await db.execute(
            select(PersonalizedProgramAttempt)
            .where(PersonalizedProgramAttempt.feed_id == feed_id)
            .order_by(PersonalizedProgramAttempt.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def find_history_by_user_id(
        self,
        db: AsyncSession,
        user_id: str,
        feed_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[AttemptHistoryRow], int]:
        """
        Attempts across a user's feeds, newest first, with the feed name
        and the title of the program produced (if any).
        """
        conditions = [PersonalizedProgramAttempt.user_id == user_id]
        if feed_id is not None:
            conditions.append(PersonalizedProgramAttempt.feed_id == feed_id)

        total = await db.scalar(
            select(func.count(PersonalizedProgramAttempt.id)).where(*conditions)
        )
        result = await db.execute(
            select(PersonalizedProgramAttempt, PersonalizedFeed.name, PersonalizedProgram.title)
            .join(PersonalizedFeed, PersonalizedFeed.id == PersonalizedProgramAttempt.feed_id)
            .outerjoin(
                PersonalizedProgram,
                PersonalizedProgram.id == PersonalizedProgramAttempt.program_id,
            )
            .where(*conditions)
            .order_by(PersonalizedProgramAttempt.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = [
            AttemptHistoryRow(attempt=attempt, feed_name=feed_name, program_title=title)
            for attempt, feed_name, title in result.all()
        ]
        return rows, total or 0

    async def count_by_status(self, db: AsyncSession, feed_id: str) -> Dict[str, int]:
        result = await db.execute(
            select(PersonalizedProgramAttempt.status, func.count(PersonalizedProgramAttempt.id))
            .where(PersonalizedProgramAttempt.feed_id == feed_id)
            .group_by(PersonalizedProgramAttempt.status)
        )
        return {status: count for status, count in result.all()}

    async def find_last_attempt_date(
        self,
        db: AsyncSession,
        feed_id: str,
        status: Optional[AttemptStatus] = None,
    ) -> Optional[datetime]:
        query = select(func.max(PersonalizedProgramAttempt.created_at)).where(
            PersonalizedProgramAttempt.feed_id == feed_id
        )
        if status is not None:
            query = query.where(PersonalizedProgramAttempt.status == status.value)
        result = await db.execute(query)
        return result.scalar_one_or_none()


personalized_programs_repository = PersonalizedProgramsRepository()
program_attempts_repository = ProgramAttemptsRepository()
