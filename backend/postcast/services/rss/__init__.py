"""
Personal RSS services.

Pure feed generation, RSS state, object storage and the lifecycle
coordinator tying them to user settings.
"""

from postcast.services.rss.generator import (
    RssGenerationOptions,
    RssGenerationResult,
    RssProgram,
    RssUser,
    build_rss_path,
    build_rss_url,
    generate_user_rss,
    validate_rss_generation,
)
from postcast.services.rss.lifecycle import (
    RssFileGenerationResult,
    RssLifecycleCoordinator,
    rss_lifecycle_coordinator,
)
from postcast.services.rss.state import RssDisabled, RssEnabled, RssState, rss_state_of
from postcast.services.rss.storage import RssFileStorage, RssUploadResult, rss_file_storage

__all__ = [
    "RssGenerationOptions",
    "RssGenerationResult",
    "RssProgram",
    "RssUser",
    "build_rss_path",
    "build_rss_url",
    "generate_user_rss",
    "validate_rss_generation",
    "RssFileGenerationResult",
    "RssLifecycleCoordinator",
    "rss_lifecycle_coordinator",
    "RssDisabled",
    "RssEnabled",
    "RssState",
    "rss_state_of",
    "RssFileStorage",
    "RssUploadResult",
    "rss_file_storage",
]
