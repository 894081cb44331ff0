"""
API Package.

Exports API components.
"""

from postcast.api.routes import (
    dashboard_router,
    personalized_feeds_router,
    qiita_posts_router,
    subscription_router,
    user_settings_router,
    webhooks_router,
)

__all__ = [
    "dashboard_router",
    "personalized_feeds_router",
    "qiita_posts_router",
    "subscription_router",
    "user_settings_router",
    "webhooks_router",
]
