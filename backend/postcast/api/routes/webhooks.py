"""
Webhook API Routes

Unauthenticated by bearer token; every request must carry a valid Svix
signature instead.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from postcast.api.schemas import WebhookAckResponse
from postcast.config.logging import get_logger
from postcast.db import get_db_session
from postcast.services.webhooks import clerk_webhook_service, verify_clerk_webhook

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/clerk", response_model=WebhookAckResponse)
async def receive_clerk_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> WebhookAckResponse:
    """User lifecycle events from Clerk."""
    payload = await request.body()
    event = verify_clerk_webhook(payload, request.headers)

    logger.info("Clerk webhook received", event_type=event["type"])
    event_type = await clerk_webhook_service.handle_event(db, event)
    return WebhookAckResponse(received=True, event_type=event_type)
