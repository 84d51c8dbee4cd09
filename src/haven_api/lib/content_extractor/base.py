"""Abstract content extractor — per-collection read adapter for exports."""

from abc import ABC
from collections.abc import Sequence
from typing import Any, ClassVar

from sqlalchemy import ColumnElement, Select, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.orm.interfaces import LoaderOption

from haven_api.lib.content_extractor.filters import ExportFilters, resolve_date_range
from haven_api.models.base import Base
from haven_api.models.user import User

EXTRACT_STREAM_BATCH_SIZE = 1000


def user_summary(user: User | None, *, include_email: bool = True) -> dict[str, Any] | None:
    """Reduce a referenced user to a display-safe subset.

    Args:
        user: The referenced user, if any.
        include_email: Whether to include the email address.

    Returns:
        Dict with id and name fields (and email), or None.
    """
    if user is None:
        return None
    summary: dict[str, Any] = {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
    }
    if include_email:
        summary["email"] = user.email
    return summary


class ContentExtractor(ABC):
    """Read adapter for one content collection.

    Subclasses declare the model, which columns carry media, and which
    columns are never exported; they extend ``criteria`` with their
    type-specific predicates and ``related_fields`` with resolved references.
    Extraction has no side effects and can be repeated freely.
    """

    content_type: ClassVar[str]
    model: ClassVar[type[Base]]
    media_fields: ClassVar[frozenset[str]] = frozenset()
    excluded_fields: ClassVar[frozenset[str]] = frozenset()
    has_status: ClassVar[bool] = True

    def _column(self, name: str) -> InstrumentedAttribute[Any]:
        return getattr(self.model, name)

    def criteria(self, filters: ExportFilters) -> list[ColumnElement[bool]]:
        """Build the WHERE predicates for the given filters.

        The base implementation handles the date range (on ``created_at``)
        and, for collections with a status column, the status filter.
        """
        clauses: list[ColumnElement[bool]] = []
        start, end = resolve_date_range(filters.date_range, filters.custom_start_date, filters.custom_end_date)
        created_at = self._column("created_at")
        if start is not None:
            clauses.append(created_at >= start)
        if end is not None:
            clauses.append(created_at <= end)

        status = filters.status_predicate
        if status is not None and self.has_status:
            clauses.append(self._column("status") == status)
        return clauses

    def load_options(self) -> Sequence[LoaderOption]:
        """Eager-load options for the references resolved by ``related_fields``."""
        return ()

    def related_fields(self, row: Any) -> dict[str, Any]:
        """Resolved references to merge into the exported record."""
        return {}

    def build_query(self, filters: ExportFilters) -> Select[Any]:
        """Build the ordered select for matching records."""
        return (
            select(self.model)
            .where(*self.criteria(filters))
            .options(*self.load_options())
            .order_by(self._column("created_at"), self._column("id"))
        )

    def to_record(self, row: Any, *, include_media: bool) -> dict[str, Any]:
        """Project an ORM row into an export record."""
        record: dict[str, Any] = {}
        for attr in inspect(self.model).column_attrs:
            key = attr.key
            if key in self.excluded_fields:
                continue
            if not include_media and key in self.media_fields:
                continue
            record[key] = getattr(row, key)
        record.update(self.related_fields(row))
        return record

    async def count(self, session: AsyncSession, filters: ExportFilters) -> int:
        """Count records matching the filters."""
        stmt = select(func.count()).select_from(self.model).where(*self.criteria(filters))
        return (await session.execute(stmt)).scalar_one()

    async def extract(
        self,
        session: AsyncSession,
        filters: ExportFilters,
        *,
        include_media: bool = False,
    ) -> list[dict[str, Any]]:
        """Fetch matching records in creation order using a streaming cursor.

        Args:
            session: Database session.
            filters: Filter criteria.
            include_media: Keep media/attachment columns when True.

        Returns:
            List of export record dicts.
        """
        query = self.build_query(filters).execution_options(yield_per=EXTRACT_STREAM_BATCH_SIZE)
        result = await session.stream(query)

        records: list[dict[str, Any]] = []
        async for partition in result.scalars().partitions():
            records.extend(self.to_record(row, include_media=include_media) for row in partition)
        return records


class UnsupportedContentExtractor:
    """Stand-in for unknown content types: always empty, never an error."""

    def __init__(self, content_type: str) -> None:
        self.content_type = content_type

    async def count(self, session: AsyncSession, filters: ExportFilters) -> int:
        return 0

    async def extract(
        self,
        session: AsyncSession,
        filters: ExportFilters,
        *,
        include_media: bool = False,
    ) -> list[dict[str, Any]]:
        return []
