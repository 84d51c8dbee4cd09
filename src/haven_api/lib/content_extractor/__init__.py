"""Content extractor library — per-collection read adapters for exports.

Public API:
    - ContentExtractor: Abstract read adapter (count / extract)
    - ExportFilters: Filter criteria shared by all extractors
    - resolve_date_range: Date-range preset resolution
    - get_extractor: Capability table lookup by content-type identifier
    - get_supported_content_types: Registered content-type identifiers
    - CONTENT_TYPES / DATE_RANGE_OPTIONS / STATUS_OPTIONS: Static catalog data
"""

from haven_api.lib.content_extractor.attendance import AttendanceExtractor
from haven_api.lib.content_extractor.base import (
    ContentExtractor,
    UnsupportedContentExtractor,
    user_summary,
)
from haven_api.lib.content_extractor.blogs import BlogExtractor
from haven_api.lib.content_extractor.catalog import (
    CONTENT_TYPES,
    DATE_RANGE_OPTIONS,
    STATUS_OPTIONS,
    ContentTypeInfo,
)
from haven_api.lib.content_extractor.contacts import ContactExtractor
from haven_api.lib.content_extractor.events import EventExtractor
from haven_api.lib.content_extractor.filters import DateRangePreset, ExportFilters, as_utc, resolve_date_range
from haven_api.lib.content_extractor.ministries import MinistryExtractor
from haven_api.lib.content_extractor.sermons import SermonExtractor
from haven_api.lib.content_extractor.users import UserExtractor

# Capability table: content-type identifier -> extractor implementation
_EXTRACTORS: dict[str, type[ContentExtractor]] = {
    cls.content_type: cls
    for cls in (
        BlogExtractor,
        SermonExtractor,
        EventExtractor,
        UserExtractor,
        MinistryExtractor,
        AttendanceExtractor,
        ContactExtractor,
    )
}


def get_supported_content_types() -> list[str]:
    """Return registered content-type identifiers in catalog order."""
    return [info.id for info in CONTENT_TYPES if info.id in _EXTRACTORS]


def is_supported_content_type(content_type: str) -> bool:
    return content_type in _EXTRACTORS


def get_extractor(content_type: str) -> ContentExtractor | UnsupportedContentExtractor:
    """Get the extractor registered for a content type.

    Unknown identifiers get an extractor that reports zero records; rejecting
    them is the caller's job.
    """
    cls = _EXTRACTORS.get(content_type)
    if cls is None:
        return UnsupportedContentExtractor(content_type)
    return cls()


__all__ = [
    "CONTENT_TYPES",
    "DATE_RANGE_OPTIONS",
    "STATUS_OPTIONS",
    "AttendanceExtractor",
    "BlogExtractor",
    "ContactExtractor",
    "ContentExtractor",
    "ContentTypeInfo",
    "DateRangePreset",
    "EventExtractor",
    "ExportFilters",
    "MinistryExtractor",
    "SermonExtractor",
    "UnsupportedContentExtractor",
    "UserExtractor",
    "as_utc",
    "get_extractor",
    "get_supported_content_types",
    "is_supported_content_type",
    "resolve_date_range",
    "user_summary",
]
