"""
App User Model

SQLAlchemy model for application users, including notification
settings and personal RSS state.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import TIMESTAMP, Boolean, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from postcast.db.connection import Base
from postcast.models.common import utcnow


class AppUser(Base):
    """
    Application user.

    The primary key is the identity provider's user id, so rows are
    created by the sign-up webhook rather than by this API.
    """

    __tablename__ = "app_users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    # Profile
    first_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Notifications
    slack_webhook_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notification_enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Personal RSS
    rss_enabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rss_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        unique=True,
        nullable=True,
        index=True,
    )
    rss_created_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
    rss_updated_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<AppUser(id={self.id}, display_name='{self.display_name}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert user to dictionary for API responses."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "email": self.email,
            "is_active": self.is_active,
            "notification_enabled": self.notification_enabled,
            "rss_enabled": self.rss_enabled,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
