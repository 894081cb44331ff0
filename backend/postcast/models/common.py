"""
Shared column helpers for models.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

# Japan has no DST, a fixed offset is exact
JST = timezone(timedelta(hours=9), "JST")


def generate_id() -> str:
    """Primary keys are UUID4 strings generated application-side."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
