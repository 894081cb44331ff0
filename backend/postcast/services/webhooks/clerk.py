"""
Identity Provider Webhooks

Clerk delivers user lifecycle events through Svix. A payload is only
applied after its signature verifies against CLERK_WEBHOOK_SECRET.
https://clerk.com/docs/webhooks/sync-data

- user.created: insert the AppUser with an ACTIVE subscription to the Free plan
- user.updated: refresh profile fields of a known user
- user.deleted: delete the published RSS file, then the user
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from svix.webhooks import Webhook, WebhookVerificationError

from postcast.config.logging import get_logger
from postcast.config.settings import settings
from postcast.errors import UserProvisioningError, ValidationError, WebhookSignatureError
from postcast.models import AppUser, SubscriptionStatus
from postcast.models.common import utcnow
from postcast.repositories import app_users_repository, subscriptions_repository
from postcast.services.rss import RssLifecycleCoordinator, rss_lifecycle_coordinator

logger = get_logger(__name__)

USER_CREATED = "user.created"
USER_UPDATED = "user.updated"
USER_DELETED = "user.deleted"


def verify_clerk_webhook(
    payload: bytes,
    headers: Mapping[str, str],
    secret: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Verify the Svix signature headers and return the decoded event.

    Raises:
        WebhookSignatureError: If the secret is unset or the signature,
            timestamp or headers do not verify.
        ValidationError: If the verified payload is not an event object.
    """
    secret = settings.clerk_webhook_secret if secret is None else secret
    if not secret:
        logger.error("CLERK_WEBHOOK_SECRET is not configured")
        raise WebhookSignatureError("Webhook signing secret is not configured")

    try:
        event = Webhook(secret).verify(payload, dict(headers))
    except (WebhookVerificationError, ValueError) as e:
        logger.warning(
            "Webhook signature verification failed",
            svix_id=headers.get("svix-id"),
            error=str(e),
        )
        raise WebhookSignatureError("Webhook signature verification failed") from e

    if not isinstance(event, dict) or not isinstance(event.get("type"), str):
        raise ValidationError("Webhook payload is not an event")
    return event


@dataclass(frozen=True)
class ClerkUserProfile:
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    image_url: Optional[str]

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        if name:
            return name
        return (self.email or "").split("@")[0]

    @classmethod
    def from_event_data(cls, data: Dict[str, Any]) -> "ClerkUserProfile":
        if not data.get("id"):
            raise ValidationError("User event has no user id")

        addresses = data.get("email_addresses") or []
        primary_id = data.get("primary_email_address_id")
        email = next(
            (a.get("email_address") for a in addresses if a.get("id") == primary_id),
            None,
        )
        if email is None and addresses:
            email = addresses[0].get("email_address")

        return cls(
            id=data["id"],
            email=email,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            image_url=data.get("image_url"),
        )


class ClerkWebhookService:
    """Applies verified user events. Redelivered events are harmless."""

    def __init__(self, rss_coordinator: Optional[RssLifecycleCoordinator] = None):
        self._rss = rss_coordinator or rss_lifecycle_coordinator

    async def handle_event(self, db: AsyncSession, event: Dict[str, Any]) -> str:
        event_type = event["type"]
        data = event.get("data") or {}

        if event_type == USER_CREATED:
            await self.handle_user_created(db, ClerkUserProfile.from_event_data(data))
        elif event_type == USER_UPDATED:
            await self.handle_user_updated(db, ClerkUserProfile.from_event_data(data))
        elif event_type == USER_DELETED:
            await self.handle_user_deleted(db, data.get("id"))
        else:
            logger.warning("Ignoring unsupported webhook event", event_type=event_type)

        return event_type

    async def handle_user_created(self, db: AsyncSession, profile: ClerkUserProfile) -> AppUser:
        """
        Raises:
            UserProvisioningError: If the Free plan is missing or the
                inserts fail. Nothing is written in either case.
        """
        existing = await app_users_repository.find_by_id(db, profile.id)
        if existing is not None:
            logger.info("User already provisioned", user_id=profile.id)
            return existing

        free_plan = await subscriptions_repository.find_plan_by_id(db, settings.free_plan_id)
        if free_plan is None:
            logger.error(
                "Free plan missing, cannot provision user",
                plan_id=settings.free_plan_id,
                user_id=profile.id,
            )
            raise UserProvisioningError(
                f"Free plan {settings.free_plan_id} not found",
                user_id=profile.id,
            )

        try:
            user = await app_users_repository.create(
                db,
                id=profile.id,
                email=profile.email,
                first_name=profile.first_name,
                last_name=profile.last_name,
                display_name=profile.display_name,
                image_url=profile.image_url,
                is_active=True,
            )
            await subscriptions_repository.create(
                db,
                user_id=user.id,
                plan_id=free_plan.id,
                status=SubscriptionStatus.ACTIVE.value,
                start_date=utcnow(),
                is_active=True,
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Failed to provision user", user_id=profile.id, error=str(e))
            raise UserProvisioningError("Failed to provision user", user_id=profile.id) from e

        logger.info("User provisioned", user_id=user.id, plan_id=free_plan.id)
        return user

    async def handle_user_updated(
        self,
        db: AsyncSession,
        profile: ClerkUserProfile,
    ) -> Optional[AppUser]:
        user = await app_users_repository.find_by_id(db, profile.id)
        if user is None:
            logger.warning("Update for unknown user ignored", user_id=profile.id)
            return None

        user.email = profile.email
        user.first_name = profile.first_name
        user.last_name = profile.last_name
        user.display_name = profile.display_name
        user.image_url = profile.image_url

        await app_users_repository.save(db, user)
        await db.commit()

        logger.info("User profile updated", user_id=user.id)
        return user

    async def handle_user_deleted(self, db: AsyncSession, user_id: Optional[str]) -> bool:
        """Returns False when there was nothing to delete."""
        if not user_id:
            logger.warning("Delete event without user id ignored")
            return False

        user = await app_users_repository.find_by_id(db, user_id)
        if user is None:
            logger.warning("Delete for unknown user ignored", user_id=user_id)
            return False

        if user.rss_token:
            await self._rss.delete_remote(user.id, user.rss_token)

        await app_users_repository.delete(db, user)
        await db.commit()

        logger.info("User deleted", user_id=user_id)
        return True


clerk_webhook_service = ClerkWebhookService()
