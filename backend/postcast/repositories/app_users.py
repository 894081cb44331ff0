"""
App Users Repository
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger
from postcast.errors import UserNotFoundError
from postcast.models import AppUser

logger = get_logger(__name__)


class AppUsersRepository:
    """Data access for AppUser rows."""

    async def find_by_id(self, db: AsyncSession, user_id: str) -> Optional[AppUser]:
        result = await db.execute(select(AppUser).where(AppUser.id == user_id))
        return result.scalar_one_or_none()

    async def find_active_by_id(self, db: AsyncSession, user_id: str) -> AppUser:
        """
        Fetch an active user.

        Raises:
            UserNotFoundError: If the user does not exist or was deactivated.
        """
        user = await self.find_by_id(db, user_id)
        if user is None or not user.is_active:
            logger.warning("User not found or inactive", user_id=user_id)
            raise UserNotFoundError(user_id)
        return user

    async def create(self, db: AsyncSession, **attrs: Any) -> AppUser:
        user = AppUser(**attrs)
        db.add(user)
        await db.flush()
        return user

    async def save(self, db: AsyncSession, user: AppUser) -> AppUser:
        """Flush pending attribute changes on `user`."""
        db.add(user)
        await db.flush()
        return user

    async def delete(self, db: AsyncSession, user: AppUser) -> None:
        """Hard delete. Feeds, programs and subscriptions cascade in the database."""
        await db.delete(user)
        await db.flush()


app_users_repository = AppUsersRepository()
