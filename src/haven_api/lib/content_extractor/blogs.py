"""Blog post extractor."""

import uuid
from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.models.blog import Blog


class BlogExtractor(ContentExtractor):
    """Exports blog posts with author and moderator resolved to name/email."""

    content_type = "blogs"
    model = Blog
    media_fields = frozenset({"featured_image", "images"})

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        clauses = super().criteria(filters)
        if filters.category:
            clauses.append(Blog.category == filters.category)
        if filters.author:
            clauses.append(Blog.author_id == uuid.UUID(str(filters.author)))
        return clauses

    def load_options(self) -> tuple:
        return (selectinload(Blog.author), selectinload(Blog.moderated_by))

    def related_fields(self, row: Blog) -> dict[str, Any]:
        return {
            "author": user_summary(row.author),
            "moderated_by": user_summary(row.moderated_by, include_email=False),
        }
