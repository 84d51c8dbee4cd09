"""ORM model registry — import all models so they register with Base.metadata."""

from haven_api.models.attendance import Attendance
from haven_api.models.blog import Blog
from haven_api.models.contact import Contact
from haven_api.models.event import Event, EventAttendee
from haven_api.models.ministry import MembershipRole, Ministry, MinistryMember
from haven_api.models.sermon import Sermon
from haven_api.models.user import User

__all__ = [
    "Attendance",
    "Blog",
    "Contact",
    "Event",
    "EventAttendee",
    "MembershipRole",
    "Ministry",
    "MinistryMember",
    "Sermon",
    "User",
]
