"""
Personalized Program Models

Generated audio programs, the posts each one introduces, and the
append-only log of generation attempts.
"""

import enum
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, TIMESTAMP, Boolean, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from postcast.db.connection import Base
from postcast.models.common import generate_id, utcnow


class AttemptStatus(str, enum.Enum):
    """Outcome of a single program generation run."""
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class PersonalizedProgram(Base):
    """
    Audio program generated for one feed.

    `audio_duration` is stored in milliseconds.
    """

    __tablename__ = "personalized_programs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("app_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    feed_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("personalized_feeds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    script: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # [{"title": ..., "start_time": ms, "end_time": ms}, ...]
    chapters: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    audio_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )
    is_expired: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<PersonalizedProgram(id={self.id}, title='{self.title[:50]}...')>"


class PersonalizedProgramPost(Base):
    """A Qiita post introduced in a program, snapshotted at generation time."""

    __tablename__ = "personalized_program_posts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    program_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("personalized_programs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    post_id: Mapped[str] = mapped_column(String(50), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(255), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stocks_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<PersonalizedProgramPost(program_id={self.program_id}, post_id={self.post_id})>"


class PersonalizedProgramAttempt(Base):
    """
    Immutable record of one program-generation run.

    Rows are only ever inserted.
    """

    __tablename__ = "personalized_program_attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_id)
    user_id: Mapped[str] = mapped_column(
        String(255),
        ForeignKey("app_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    feed_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("personalized_feeds.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    program_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("personalized_programs.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    def __repr__(self) -> str:
        return f"<PersonalizedProgramAttempt(id={self.id}, status={self.status})>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "feed_id": self.feed_id,
            "status": self.status,
            "reason": self.reason,
            "post_count": self.post_count,
            "program_id": self.program_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
