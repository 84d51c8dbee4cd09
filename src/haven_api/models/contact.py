"""Contact model — contact form submissions and inquiries."""

import uuid

from sqlalchemy import JSON, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haven_api.models.base import Base, TimestampMixin, UUIDMixin
from haven_api.models.user import User


class Contact(Base, UUIDMixin, TimestampMixin):
    """A contact form submission.

    Attributes:
        documents: Attachments uploaded with the submission (``url``, ``name``).
    """

    __tablename__ = "contacts"

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    contact_type: Mapped[str] = mapped_column(String(30), nullable=False, default="general")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="normal")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new", index=True)
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True)
    documents: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    assigned_to: Mapped[User | None] = relationship(foreign_keys=[assigned_to_id], lazy="raise")
