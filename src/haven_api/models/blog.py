"""Blog model — posts, articles and announcements."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haven_api.models.base import Base, TimestampMixin, UUIDMixin
from haven_api.models.user import User


class Blog(Base, UUIDMixin, TimestampMixin):
    """A blog post.

    Attributes:
        featured_image: ``{"url", "alt", "caption"}`` for the hero image.
        images: List of inline image dicts with the same shape.
    """

    __tablename__ = "blogs"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), unique=True, nullable=False)
    excerpt: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", index=True)
    author_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    moderated_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    featured_image: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    author: Mapped[User] = relationship(foreign_keys=[author_id], lazy="raise")
    moderated_by: Mapped[User | None] = relationship(foreign_keys=[moderated_by_id], lazy="raise")
