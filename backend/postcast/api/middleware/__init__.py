"""
API Middleware Package.
"""

from postcast.api.middleware.auth import (
    bearer_scheme,
    decode_session_token,
    get_current_user_id,
)

__all__ = [
    "bearer_scheme",
    "decode_session_token",
    "get_current_user_id",
]
