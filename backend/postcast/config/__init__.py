"""
Configuration package.

Environment-driven settings and the structlog setup shared by every
module.
"""

from postcast.config.logging import get_logger, mask_token, mask_webhook_url, setup_logging
from postcast.config.settings import Settings, get_settings, settings

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "setup_logging",
    "get_logger",
    "mask_token",
    "mask_webhook_url",
]
