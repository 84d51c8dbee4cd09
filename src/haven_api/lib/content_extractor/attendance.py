"""Attendance record extractor."""

from typing import Any

from sqlalchemy.orm import selectinload

from haven_api.lib.content_extractor.base import ContentExtractor, user_summary
from haven_api.models.attendance import Attendance


class AttendanceExtractor(ContentExtractor):
    content_type = "attendance"
    model = Attendance
    # Attendance status is present/late/..., not a publication status
    has_status = False

    def load_options(self) -> tuple:
        return (selectinload(Attendance.user),)

    def related_fields(self, row: Attendance) -> dict[str, Any]:
        return {"user": user_summary(row.user)}
