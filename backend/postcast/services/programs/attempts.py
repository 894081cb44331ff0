"""
Program Attempts Service

History and statistics of program generation runs for a feed.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import FeedNotFoundError
from postcast.models import AttemptStatus, PersonalizedProgramAttempt
from postcast.repositories import personalized_feeds_repository, program_attempts_repository

logger = get_logger(__name__)


@dataclass
class ProgramAttemptsPage:
    attempts: List[PersonalizedProgramAttempt] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.limit) if self.limit > 0 else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class ProgramAttemptStatistics:
    total_attempts: int
    success_count: int
    skipped_count: int
    failed_count: int
    success_rate: float
    last_attempt_date: Optional[datetime]
    last_success_date: Optional[datetime]


def success_rate(success_count: int, total: int) -> float:
    """Percentage of successful attempts, rounded to 2 decimals."""
    if total == 0:
        return 0.0
    return round(success_count / total * 100, 2)


class ProgramAttemptsService:
    """Read-only access to attempts, scoped to feeds the user owns."""

    async def _ensure_feed_owned(self, db: AsyncSession, feed_id: str, user_id: str) -> None:
        feed = await personalized_feeds_repository.find_by_id(db, feed_id)
        if feed is None or feed.user_id != user_id:
            logger.warning("Attempt access to unknown feed", feed_id=feed_id, user_id=user_id)
            raise FeedNotFoundError(feed_id, user_id)

    async def find_by_feed_id(
        self,
        db: AsyncSession,
        user_id: str,
        feed_id: str,
        page: int = 1,
        limit: int = 20,
    ) -> ProgramAttemptsPage:
        await self._ensure_feed_owned(db, feed_id, user_id)

        attempts, total = await program_attempts_repository.find_by_feed_id(
            db, feed_id, page=page, limit=limit
        )
        return ProgramAttemptsPage(attempts=attempts, total_count=total, page=page, limit=limit)

    async def get_statistics(
        self,
        db: AsyncSession,
        user_id: str,
        feed_id: str,
    ) -> ProgramAttemptStatistics:
        await self._ensure_feed_owned(db, feed_id, user_id)

        counts = await program_attempts_repository.count_by_status(db, feed_id)
        success_count = counts.get(AttemptStatus.SUCCESS.value, 0)
        skipped_count = counts.get(AttemptStatus.SKIPPED.value, 0)
        failed_count = counts.get(AttemptStatus.FAILED.value, 0)
        total = sum(counts.values())

        return ProgramAttemptStatistics(
            total_attempts=total,
            success_count=success_count,
            skipped_count=skipped_count,
            failed_count=failed_count,
            success_rate=success_rate(success_count, total),
            last_attempt_date=await program_attempts_repository.find_last_attempt_date(db, feed_id),
            last_success_date=await program_attempts_repository.find_last_attempt_date(
                db, feed_id, status=AttemptStatus.SUCCESS
            ),
        )


program_attempts_service = ProgramAttemptsService()
