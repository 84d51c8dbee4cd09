"""User extractor. Password hashes never leave the store."""

from sqlalchemy import ColumnElement

from haven_api.lib.content_extractor.base import ContentExtractor
from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.models.user import User


class UserExtractor(ContentExtractor):
    content_type = "users"
    model = User
    media_fields = frozenset({"avatar_url"})
    excluded_fields = frozenset({"hashed_password"})
    has_status = False

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        clauses = super().criteria(filters)
        if filters.role:
            clauses.append(User.role == filters.role)
        if filters.active is not None:
            clauses.append(User.active.is_(filters.active))
        return clauses
