"""Static descriptions of the exportable content types and filter presets."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ContentTypeInfo:
    """Display metadata for one exportable content type."""

    id: str
    name: str
    description: str
    fields: tuple[str, ...]
    estimated_size: str


CONTENT_TYPES: tuple[ContentTypeInfo, ...] = (
    ContentTypeInfo(
        id="blogs",
        name="Blog Posts",
        description="All blog posts, articles, and announcements",
        fields=("title", "excerpt", "content", "author", "category", "tags", "status", "created_at", "published_at"),
        estimated_size="Medium",
    ),
    ContentTypeInfo(
        id="sermons",
        name="Sermons",
        description="All sermons with media files and transcripts",
        fields=(
            "title",
            "description",
            "scripture_reference",
            "speaker_name",
            "service_date",
            "category",
            "media",
            "status",
        ),
        estimated_size="Large",
    ),
    ContentTypeInfo(
        id="events",
        name="Events",
        description="All church events and programs",
        fields=("title", "description", "start_date", "end_date", "category", "location", "attendees", "status"),
        estimated_size="Medium",
    ),
    ContentTypeInfo(
        id="users",
        name="Users",
        description="All registered users and members",
        fields=("first_name", "last_name", "email", "role", "active", "created_at", "last_login"),
        estimated_size="Small",
    ),
    ContentTypeInfo(
        id="ministries",
        name="Ministries",
        description="All church ministries and departments",
        fields=("name", "description", "category", "leaders", "members", "status"),
        estimated_size="Small",
    ),
    ContentTypeInfo(
        id="attendance",
        name="Attendance Records",
        description="All attendance tracking data",
        fields=("user", "activity_type", "activity_title", "attendance_date", "check_in_time"),
        estimated_size="Large",
    ),
    ContentTypeInfo(
        id="contacts",
        name="Contact Submissions",
        description="All contact form submissions and inquiries",
        fields=("first_name", "last_name", "email", "subject", "message", "contact_type", "created_at"),
        estimated_size="Small",
    ),
)

DATE_RANGE_OPTIONS: tuple[tuple[str, str], ...] = (
    ("all", "All Time"),
    ("last7days", "Last 7 Days"),
    ("last30days", "Last 30 Days"),
    ("last90days", "Last 90 Days"),
    ("lastYear", "Last Year"),
    ("custom", "Custom Range"),
)

STATUS_OPTIONS: tuple[tuple[str, str], ...] = (
    ("all", "All Statuses"),
    ("published", "Published Only"),
    ("draft", "Drafts Only"),
    ("archived", "Archived Only"),
)
