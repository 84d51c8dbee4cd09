"""Ministry extractor."""

from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.lib.content_extractor.filters import ExportFilters
from haven_api.models.ministry import MembershipRole, Ministry, MinistryMember


class MinistryExtractor(ContentExtractor):
    """Exports ministries with leaders and members split out of the membership table."""

    content_type = "ministries"
    model = Ministry
    media_fields = frozenset({"images"})

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        clauses = super().criteria(filters)
        if filters.category:
            clauses.append(Ministry.category == filters.category)
        return clauses

    def load_options(self) -> tuple:
        return (selectinload(Ministry.memberships).selectinload(MinistryMember.user),)

    def related_fields(self, row: Ministry) -> dict[str, Any]:
        leaders: list[dict[str, Any]] = []
        members: list[dict[str, Any]] = []
        for membership in row.memberships:
            entry = {"user": user_summary(membership.user), "joined_at": membership.joined_at}
            if membership.role == MembershipRole.LEADER:
                leaders.append(entry)
            else:
                members.append(entry)
        return {"leaders": leaders, "members": members}
