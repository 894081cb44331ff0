"""
Inbound webhooks from the identity provider.
"""

from postcast.services.webhooks.clerk import (
    ClerkUserProfile,
    ClerkWebhookService,
    clerk_webhook_service,
    verify_clerk_webhook,
)

__all__ = [
    "ClerkUserProfile",
    "ClerkWebhookService",
    "clerk_webhook_service",
    "verify_clerk_webhook",
]
