"""Sermon extractor."""

from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.models.sermon import Sermon


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SermonExtractor(ContentExtractor):
    """Exports sermons; ``media`` holds audio/video/transcript/slide links."""

    content_type = "sermons"
    model = Sermon
    media_fields = frozenset({"media", "featured_image_url"})

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        clauses = super().criteria(filters)
        if filters.category:
            clauses.append(Sermon.category == filters.category)
        if filters.speaker:
            pattern = f"%{_escape_like(filters.speaker)}%"
            clauses.append(Sermon.speaker_name.ilike(pattern, escape="\\"))
        return clauses

    def load_options(self) -> tuple:
        return (selectinload(Sermon.created_by), selectinload(Sermon.moderated_by))

    def related_fields(self, row: Sermon) -> dict[str, Any]:
        return {
            "created_by": user_summary(row.created_by, include_email=False),
            "moderated_by": user_summary(row.moderated_by, include_email=False),
        }
