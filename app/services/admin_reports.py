"""Client-side helpers for the admin job reports list."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel

from app.models.report import Report, ReportStatus

# Empty value or "all" disables a filter
ALL = ("", "all")


class ReportStats(BaseModel):
    total: int = 0
    pending: int = 0
    reviewed: int = 0
    resolved: int = 0
    dismissed: int = 0


def filter_reports(
    reports: Iterable[Report], search: str = "", status: str = "", reason: str = ""
) -> list[Report]:
    """Фильтр по строке поиска (вакансия, компания, автор жалобы), статусу и причине."""
    q = search.lower()
    result = []
    for r in reports:
        if q:
            haystack = [r.job_title or "", r.job_company or ""]
            if r.reported_by is not None:
                haystack += [
                    r.reported_by.first_name or "",
                    r.reported_by.last_name or "",
                    r.reported_by.company_name or "",
                ]
            if not any(q in value.lower() for value in haystack):
                continue
        if status not in ALL and r.status.value != status:
            continue
        if reason not in ALL and r.reason != reason:
            continue
        result.append(r)
    return result


def report_stats(reports: Iterable[Report]) -> ReportStats:
    stats = ReportStats()
    for r in reports:
        stats.total += 1
        if r.status == ReportStatus.PENDING:
            stats.pending += 1
        elif r.status == ReportStatus.REVIEWED:
            stats.reviewed += 1
        elif r.status == ReportStatus.RESOLVED:
            stats.resolved += 1
        else:
            stats.dismissed += 1
    return stats


def mark_status(reports: Sequence[Report], report_id: str, status: ReportStatus) -> list[Report]:
    """Apply a status change confirmed by the backend to the local list."""
    return [r.model_copy(update={"status": status}) if r.id == report_id else r for r in reports]
