"""Event extractor."""

from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.models.event import Event, EventAttendee


class EventExtractor(ContentExtractor):
    """Exports events with their RSVP list."""

    content_type = "events"
    model = Event
    media_fields = frozenset({"images"})

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        clauses = super().criteria(filters)
        if filters.category:
            clauses.append(Event.category == filters.category)
        if filters.event_type:
            clauses.append(Event.event_type == filters.event_type)
        return clauses

    def load_options(self) -> tuple:
        return (
            selectinload(Event.created_by),
            selectinload(Event.attendees).selectinload(EventAttendee.user),
        )

    def related_fields(self, row: Event) -> dict[str, Any]:
        return {
            "created_by": user_summary(row.created_by, include_email=False),
            "attendees": [
                {
                    "user": user_summary(attendee.user),
                    "status": attendee.status,
                    "registered_at": attendee.registered_at,
                }
                for attendee in row.attendees
            ],
        }
