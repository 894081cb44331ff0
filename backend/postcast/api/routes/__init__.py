"""
API Routes Package.

Exports all API routers.
"""

from postcast.api.routes.dashboard import router as dashboard_router
from postcast.api.routes.personalized_feeds import router as personalized_feeds_router
from postcast.api.routes.qiita_posts import router as qiita_posts_router
from postcast.api.routes.subscription import router as subscription_router
from postcast.api.routes.user_settings import router as user_settings_router
from postcast.api.routes.webhooks import router as webhooks_router

__all__ = [
    "dashboard_router",
    "personalized_feeds_router",
    "qiita_posts_router",
    "subscription_router",
    "user_settings_router",
    "webhooks_router",
]
