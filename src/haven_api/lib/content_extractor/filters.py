"""Export filter criteria and date-range preset resolution."""

from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import Any


class DateRangePreset(StrEnum):
    """Date-range presets applied to a record's ``created_at``."""

    ALL = "all"
    LAST_7_DAYS = "last7days"
    LAST_30_DAYS = "last30days"
    LAST_90_DAYS = "last90days"
    LAST_YEAR = "lastYear"
    CUSTOM = "custom"


_PRESET_WINDOWS: dict[DateRangePreset, timedelta] = {
    DateRangePreset.LAST_7_DAYS: timedelta(days=7),
    DateRangePreset.LAST_30_DAYS: timedelta(days=30),
    DateRangePreset.LAST_90_DAYS: timedelta(days=90),
    DateRangePreset.LAST_YEAR: timedelta(days=365),
}

ALL_STATUSES = "all"


@dataclass(frozen=True)
class ExportFilters:
    """Filter set applied uniformly across every selected content type.

    ``status`` and ``date_range`` apply to all types (where the collection has
    the column); the remaining fields are only honoured by the extractors of
    the content types they make sense for.
    """

    date_range: str = DateRangePreset.ALL
    custom_start_date: datetime | None = None
    custom_end_date: datetime | None = None
    status: str | None = None
    category: str | None = None
    author: str | None = None
    speaker: str | None = None
    event_type: str | None = None
    role: str | None = None
    active: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ExportFilters":
        """Build filters from a plain dict, ignoring unknown keys.

        Accepts ``type`` as an alias for ``event_type``.
        """
        data = dict(data or {})
        if "type" in data and "event_type" not in data:
            data["event_type"] = data.pop("type")
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        for key in ("custom_start_date", "custom_end_date"):
            value = known.get(key)
            if isinstance(value, str):
                known[key] = datetime.fromisoformat(value)
        return cls(**known)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict, dropping unset fields."""
        result: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, str):
                value = str(value)
            result[key] = value
        return result

    @property
    def status_predicate(self) -> str | None:
        """The status to match, or None when every status is accepted."""
        if self.status is None or self.status == ALL_STATUSES:
            return None
        return self.status


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def resolve_date_range(
    date_range: str | None,
    custom_start: datetime | None = None,
    custom_end: datetime | None = None,
    *,
    now: datetime | None = None,
) -> tuple[datetime | None, datetime | None]:
    """Resolve a date-range preset into ``(start, end)`` bounds.

    Args:
        date_range: Preset identifier (see ``DateRangePreset``).
        custom_start: Inclusive lower bound for the ``custom`` preset.
        custom_end: Inclusive upper bound for the ``custom`` preset.
        now: Reference time; defaults to the current UTC time.

    Returns:
        Tuple of optional bounds. ``(None, None)`` means no date predicate:
        ``all``, unknown presets, and a ``custom`` range missing either bound.
    """
    if not date_range or date_range == DateRangePreset.ALL:
        return None, None

    if date_range == DateRangePreset.CUSTOM:
        if custom_start is None or custom_end is None:
            return None, None
        return as_utc(custom_start), as_utc(custom_end)

    try:
        window = _PRESET_WINDOWS[DateRangePreset(date_range)]
    except (KeyError, ValueError):
        return None, None
    reference = as_utc(now) if now is not None else datetime.now(UTC)
    return reference - window, None
