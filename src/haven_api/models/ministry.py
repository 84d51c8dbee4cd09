"""Ministry model — church ministries and departments with leaders and members."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from haven_api.models.base import Base, TimestampMixin, UUIDMixin, utcnow
from haven_api.models.user import User


class MembershipRole(enum.StrEnum):
    """Role of a user within a ministry."""

    LEADER = "leader"
    MEMBER = "member"


class Ministry(Base, UUIDMixin, TimestampMixin):
    """A ministry or department."""

    __tablename__ = "ministries"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active", index=True)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    memberships: Mapped[list["MinistryMember"]] = relationship(
        back_populates="ministry",
        cascade="all, delete-orphan",
        lazy="raise",
    )


class MinistryMember(Base, UUIDMixin):
    """Membership of a user in a ministry, either as leader or member."""

    __tablename__ = "ministry_members"

    ministry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("ministries.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=MembershipRole.MEMBER)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    ministry: Mapped[Ministry] = relationship(back_populates="memberships", lazy="raise")
    user: Mapped[User] = relationship(lazy="raise")

    __table_args__ = (UniqueConstraint("ministry_id", "user_id", name="uq_ministry_member"),)
