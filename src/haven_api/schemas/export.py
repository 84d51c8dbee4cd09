"""Export Pydantic v2 request/response schemas."""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from haven_api.lib.content_extractor import ExportFilters, as_utc
from haven_api.schemas.common import PaginationMeta

if TYPE_CHECKING:
    from haven_api.services.export_service import ExportOptions


class ExportFiltersSchema(BaseModel):
    """Filter criteria for export requests."""

    model_config = ConfigDict(populate_by_name=True)

    date_range: str = Field(
        default="all",
        pattern=r"^(all|last7days|last30days|last90days|lastYear|custom)$",
    )
    custom_start_date: datetime | None = None
    custom_end_date: datetime | None = None
    status: str | None = None
    category: str | None = None
    author: str | None = None
    speaker: str | None = None
    event_type: str | None = Field(default=None, alias="type")
    role: str | None = None
    active: bool | None = None

    @model_validator(mode="after")
    def check_custom_range(self) -> "ExportFiltersSchema":
        if (
            self.custom_start_date is not None
            and self.custom_end_date is not None
            and as_utc(self.custom_start_date) > as_utc(self.custom_end_date)
        ):
            msg = "custom_start_date must not be after custom_end_date"
            raise ValueError(msg)
        return self

    def to_filters(self) -> ExportFilters:
        return ExportFilters(**self.model_dump())


class ExportRequest(BaseModel):
    """Request to create a content export."""

    content_types: list[str] = Field(..., min_length=1)
    format: str = Field(..., pattern=r"^(json|csv|xml)$")
    filters: ExportFiltersSchema = Field(default_factory=ExportFiltersSchema)
    include_media: bool = False
    compress: bool = False
    custom_file_name: str | None = Field(default=None, max_length=200)


class ExportCreatedResponse(BaseModel):
    """Response returned when an export job is accepted."""

    job_id: str
    status: str
    estimated_seconds: int
    message: str = "Export job created successfully"


class ExportJobStatusResponse(BaseModel):
    """Status snapshot of one export job."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    status: str
    progress: int
    total_items: int | None = None
    processed_items: int
    content_types: list[str]
    format: str
    file_name: str
    compress: bool
    include_media: bool
    created_at: datetime
    completed_at: datetime | None = None
    file_size: int | None = None
    error: str | None = None
    cancel_requested: bool = False
    download_url: str | None = None


class ExportJobSummary(BaseModel):
    """History entry for one export job."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    content_types: list[str]
    format: str
    file_name: str
    status: str
    progress: int
    created_by: str | None = None
    created_at: datetime
    completed_at: datetime | None = None
    file_size: int | None = None
    error: str | None = None


class PaginatedExportHistoryResponse(BaseModel):
    """Paginated list of export jobs, newest first."""

    items: list[ExportJobSummary]
    pagination: PaginationMeta


class ExportDeletedResponse(BaseModel):
    """Response for a deleted export job."""

    message: str = "Export deleted successfully"
    warning: str | None = None


class ContentTypeOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    fields: list[str]
    estimated_size: str


class FormatOption(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    extension: str
    supports_compression: bool


class FilterOption(BaseModel):
    value: str
    label: str


class ExportFilterOptions(BaseModel):
    date_ranges: list[FilterOption]
    statuses: list[FilterOption]


class ExportOptionsResponse(BaseModel):
    """Everything that can be selected when requesting an export."""

    content_types: list[ContentTypeOption]
    formats: list[FormatOption]
    filters: ExportFilterOptions

    @classmethod
    def from_options(cls, options: "ExportOptions") -> "ExportOptionsResponse":
        return cls(
            content_types=[ContentTypeOption.model_validate(info) for info in options.content_types],
            formats=[FormatOption.model_validate(info) for info in options.formats],
            filters=ExportFilterOptions(
                date_ranges=[FilterOption(value=v, label=label) for v, label in options.date_ranges],
                statuses=[FilterOption(value=v, label=label) for v, label in options.statuses],
            ),
        )
