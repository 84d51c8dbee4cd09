"""Sermon model — preached messages with media and transcripts."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haven_api.models.base import Base, TimestampMixin, UUIDMixin
from haven_api.models.user import User


class Sermon(Base, UUIDMixin, TimestampMixin):
    """A sermon.

    Attributes:
        media: ``{"audio": {...}, "video": {...}, "transcript": {...}, "slides": {...}}``
            each holding a ``url`` and file metadata.
    """

    __tablename__ = "sermons"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    scripture_reference: Mapped[str] = mapped_column(String(200), nullable=False)
    speaker_name: Mapped[str] = mapped_column(String(100), nullable=False)
    speaker_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    service_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", index=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    media: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    featured_image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    moderated_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)

    created_by: Mapped[User | None] = relationship(foreign_keys=[created_by_id], lazy="raise")
    moderated_by: Mapped[User | None] = relationship(foreign_keys=[moderated_by_id], lazy="raise")
