from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, computed_field

from app.models.pdf import ActivityType
from app.schemas.common import CamelModel


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentRead(CamelModel):
    id: UUID
    name: str
    owner_id: str
    file_hash: str
    storage_url: str
    file_size: int
    mime_type: str
    page_count: int | None = None
    is_starred: bool
    view_count: int
    last_viewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        return f"/pdf/{self.id}"


class DocumentSummary(CamelModel):
    id: UUID
    name: str
    mime_type: str


class UploadResult(CamelModel):
    success: bool = True
    id: UUID
    name: str
    url: str
    is_duplicate: bool


# ---------------------------------------------------------------------------
# Activity (append-only: create + read only)
# ---------------------------------------------------------------------------


class ActivityCreate(CamelModel):
    # Plain strings so unknown types and malformed ids surface as the
    # service's own 400/404 errors rather than a 422.
    type: str
    document_id: str | None = None
    details: str | None = Field(default=None, max_length=2000)


class ActivityRead(CamelModel):
    id: UUID
    type: ActivityType
    document_id: UUID | None = None
    owner_id: str
    details: str | None = None
    created_at: datetime


class RecentActivityRead(ActivityRead):
    document: DocumentSummary | None = None


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


class StorageUsage(CamelModel):
    used: int
    limit: int
    percentage: float


class MonthlyCount(CamelModel):
    month: str
    count: int


class UserStats(CamelModel):
    total_pdfs: int
    starred_pdfs: int
    total_views: int
    storage: StorageUsage
    activity_data: list[MonthlyCount]
    activity_counts: dict[str, int]
