"""Reports filed by users against job postings."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import field_validator

from .base import Base, IdField, ref_id


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class ReportReason(str, Enum):
    SPAM = "spam"
    SCAM = "scam"
    INAPPROPRIATE = "inappropriate"
    DUPLICATE = "duplicate"
    MISLEADING = "misleading"
    OTHER = "other"


class ReportUser(Base):
    """Reporter or poster of the job, as populated by the backend."""

    id: str | None = IdField(default=None)
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    company_name: str | None = None
    is_company: bool = False

    @property
    def display_name(self) -> str:
        if self.is_company and self.company_name:
            return self.company_name
        full = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full or self.email or "Unknown User"


class Report(Base):
    id: str = IdField()
    job_id: str
    job_title: str | None = None
    job_company: str | None = None
    job_slug: str | None = None
    job_category: str | None = None
    posted_by: ReportUser | None = None
    reported_by: ReportUser | None = None
    reason: str = ReportReason.OTHER.value
    description: str | None = None
    reported_at: datetime | None = None
    status: ReportStatus = ReportStatus.PENDING

    @field_validator("job_id", mode="before")
    @classmethod
    def normalize_job_id(cls, v: Any) -> Any:
        v = ref_id(v)
        return str(v) if v is not None else v

    @field_validator("posted_by", "reported_by", mode="before")
    @classmethod
    def drop_unpopulated_user(cls, v: Any) -> Any:
        return v if isinstance(v, dict | ReportUser) else None

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, job_id={self.job_id}, status='{self.status.value}')>"
