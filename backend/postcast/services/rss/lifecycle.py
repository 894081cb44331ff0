"""
RSS Lifecycle Coordinator

Keeps a user's published RSS file in step with their RSS settings:

- enable:  mint a token if needed, persist, publish u/{token}/rss.xml
- rotate:  mint a new token, persist, delete the old file, publish the new one
- disable: clear the token, persist, delete the old file

The database update is the primary effect. Generation, upload and
delete are best-effort side steps: each is attempted independently,
failures are logged and never raised to the caller.
"""

import asyncio
import tempfile
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from postcast.config.logging import get_logger, mask_token
from postcast.config.settings import settings
from postcast.errors import RssGenerationError, RssNotEnabledError
from postcast.models import AppUser
from postcast.models.common import utcnow
from postcast.repositories import app_users_repository, personalized_programs_repository
from postcast.services.rss.generator import (
    RssGenerationOptions,
    RssProgram,
    RssUser,
    build_rss_path,
    generate_user_rss,
)
from postcast.services.rss.state import RssEnabled, rss_state_of
from postcast.services.rss.storage import RssFileStorage, RssUploadResult, rss_file_storage

logger = get_logger(__name__)


@dataclass(frozen=True)
class RssFileGenerationResult:
    xml: str
    episode_count: int
    generated_at: datetime
    temp_file_path: str


def mint_rss_token() -> str:
    return str(uuid4())


def default_generation_options() -> RssGenerationOptions:
    return RssGenerationOptions(
        base_url=settings.lp_base_url,
        rss_url_prefix=settings.rss_url_prefix,
        default_image_url=settings.default_program_image_url,
        max_episodes=settings.rss_max_episodes,
        author_name=settings.podcast_author_name,
        author_email=settings.podcast_author_email,
    )


class RssLifecycleCoordinator:
    """
    Orchestrates RSS state changes and their object-storage side effects.

    Concurrent rotate/disable calls for the same user are not serialized;
    the last database write wins.
    """

    def __init__(
        self,
        storage: Optional[RssFileStorage] = None,
        bucket_name: Optional[str] = None,
        options: Optional[RssGenerationOptions] = None,
        temp_dir: Optional[str] = None,
    ):
        self._storage = storage or rss_file_storage
        self._bucket_name = bucket_name or settings.rss_bucket_name
        self._options = options or default_generation_options()
        self._temp_dir = temp_dir

    # =========================================================================
    # State transitions
    # =========================================================================

    async def enable(self, db: AsyncSession, user: AppUser) -> AppUser:
        """Enable RSS, minting a token when the user has none, then publish."""
        now = utcnow()
        if not user.rss_token:
            user.rss_token = mint_rss_token()
            user.rss_created_at = now
        user.rss_enabled = True
        user.rss_updated_at = now

        await app_users_repository.save(db, user)
        await db.commit()

        logger.info("RSS enabled", user_id=user.id, rss_token=mask_token(user.rss_token))

        await self.publish(db, user)
        return user

    async def rotate(self, db: AsyncSession, user: AppUser) -> AppUser:
        """
        Replace the RSS token. The file under the old token is deleted and
        a fresh file is published under the new one.

        Raises:
            RssNotEnabledError: If RSS is not enabled for the user.
        """
        state = rss_state_of(user)
        if not isinstance(state, RssEnabled):
            raise RssNotEnabledError("RSS is not enabled", user_id=user.id)

        old_token = state.token
        now = utcnow()
        user.rss_token = mint_rss_token()
        user.rss_created_at = now
        user.rss_updated_at = now

        await app_users_repository.save(db, user)
        await db.commit()

        logger.info(
            "RSS token rotated",
            user_id=user.id,
            old_rss_token=mask_token(old_token),
            new_rss_token=mask_token(user.rss_token),
        )

        await self.delete_remote(user.id, old_token)
        await self.publish(db, user)
        return user

    async def disable(self, db: AsyncSession, user: AppUser) -> AppUser:
        """Disable RSS, clear the token and delete the published file."""
        old_token = user.rss_token

        user.rss_enabled = False
        user.rss_token = None
        user.rss_created_at = None
        user.rss_updated_at = utcnow()

        await app_users_repository.save(db, user)
        await db.commit()

        logger.info("RSS disabled", user_id=user.id, rss_token=mask_token(old_token))

        if old_token:
            await self.delete_remote(user.id, old_token)
        return user

    # =========================================================================
    # Best-effort side steps
    # =========================================================================

    async def publish(self, db: AsyncSession, user: AppUser) -> Optional[RssUploadResult]:
        """
        Generate and upload the user's RSS file.

        Returns:
            The upload result, or None if any step failed.
        """
        state = rss_state_of(user)
        if not isinstance(state, RssEnabled):
            logger.warning("Skipping RSS publish for user without RSS", user_id=user.id)
            return None

        temp_file_path: Optional[str] = None
        try:
            generation = await self.generate_rss_file(db, user)
            temp_file_path = generation.temp_file_path

            result = await self._storage.upload(self._bucket_name, state.path, temp_file_path)
            logger.info(
                "RSS file published",
                user_id=user.id,
                rss_token=mask_token(state.token),
                episode_count=generation.episode_count,
            )
            return result

        except Exception as e:
            logger.warning(
                "RSS publish failed, state change kept",
                user_id=user.id,
                rss_token=mask_token(state.token),
                error_code=getattr(e, "error_code", None),
                error=str(e),
            )
            return None

        finally:
            if temp_file_path:
                await self._remove_temp_file(temp_file_path)

    async def delete_remote(self, user_id: str, rss_token: str) -> bool:
        """Delete the file published under `rss_token`. Returns False on failure."""
        try:
            await self._storage.delete(self._bucket_name, build_rss_path(rss_token))
            return True
        except Exception as e:
            logger.warning(
                "Failed to delete superseded RSS file",
                user_id=user_id,
                rss_token=mask_token(rss_token),
                error=str(e),
            )
            return False

    async def generate_rss_file(self, db: AsyncSession, user: AppUser) -> RssFileGenerationResult:
        """
        Render the user's feed into a temporary file.

        The caller owns the returned temp file and must remove it.

        Raises:
            RssGenerationError: If RSS is disabled or rendering fails.
        """
        state = rss_state_of(user)
        if not isinstance(state, RssEnabled):
            raise RssGenerationError("RSS is disabled or has no token", user_id=user.id)

        programs = await personalized_programs_repository.find_recent_by_user_id(
            db, user.id, limit=self._options.max_episodes
        )

        temp_file_path: Optional[Path] = None
        try:
            result = generate_user_rss(
                RssUser.from_model(user),
                [RssProgram.from_model(program) for program in programs],
                self._options,
            )
            temp_dir = self._temp_dir or tempfile.gettempdir()
            temp_file_path = Path(temp_dir) / f"rss_{state.token}_{int(time.time() * 1000)}.xml"
            await asyncio.to_thread(temp_file_path.write_text, result.xml, encoding="utf-8")
        except Exception as e:
            if temp_file_path is not None:
                await self._remove_temp_file(str(temp_file_path))
            raise RssGenerationError(f"RSS generation failed: {e}", user_id=user.id) from e

        logger.debug(
            "RSS file generated",
            user_id=user.id,
            episode_count=result.episode_count,
        )
        return RssFileGenerationResult(
            xml=result.xml,
            episode_count=result.episode_count,
            generated_at=result.generated_at,
            temp_file_path=str(temp_file_path),
        )

    async def _remove_temp_file(self, path: str) -> None:
        try:
            await asyncio.to_thread(Path(path).unlink, missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove temporary RSS file", error=str(e))


rss_lifecycle_coordinator = RssLifecycleCoordinator()
