"""Attendance model — check-ins for services, events and ministry meetings."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haven_api.models.base import Base, TimestampMixin, UUIDMixin
from haven_api.models.user import User


class Attendance(Base, UUIDMixin, TimestampMixin):
    """A single attendance record."""

    __tablename__ = "attendance"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    activity_type: Mapped[str] = mapped_column(String(30), nullable=False)
    activity_title: Mapped[str] = mapped_column(String(200), nullable=False)
    attendance_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_in_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="present")
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)

    user: Mapped[User] = relationship(lazy="raise")
