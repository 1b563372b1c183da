import logging

from fastapi import APIRouter, Depends, HTTPException

from admin.app.schemas import ReportsResponse, ReportUpdatedResponse, UpdateReportStatus
from app.models.report import Report
from app.services.admin_payouts import paginate
from app.services.admin_reports import filter_reports, mark_status, report_stats
from core.backend import BackendAPIError, BackendClient, get_backend, to_http_exception
from core.config import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_reports(backend: BackendClient) -> list[Report]:
    try:
        raw = await backend.job_reports()
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    return [Report.model_validate(r) for r in raw]


@router.get("/", response_model=ReportsResponse)
async def get_reports(
    search: str = "",
    status: str = "",
    reason: str = "",
    page: int = 1,
    backend: BackendClient = Depends(get_backend),
):
    """Жалобы на вакансии с поиском, фильтрами и счётчиками по статусам"""
    reports = await _load_reports(backend)
    filtered = filter_reports(reports, search, status, reason)
    return {
        "page": paginate(filtered, page, get_settings().admin_page_size),
        "stats": report_stats(reports),
    }


@router.patch("/{report_id}", response_model=ReportUpdatedResponse)
async def update_report_status(
    report_id: str,
    form: UpdateReportStatus,
    backend: BackendClient = Depends(get_backend),
):
    """Меняет статус жалобы; локальный список обновляется после ответа сервера"""
    reports = await _load_reports(backend)
    report = next((r for r in reports if r.id == report_id), None)
    if report is None:
        raise HTTPException(status_code=404, detail="Жалоба не найдена")
    if report.status == form.status:
        raise HTTPException(status_code=400, detail=f"Report is already {form.status.value}")

    try:
        await backend.update_report_status(report.job_id, report_id, form.status.value)
    except BackendAPIError as e:
        raise to_http_exception(e) from e

    reports = mark_status(reports, report_id, form.status)
    logger.info("Report status updated", extra={"report_id": report_id, "status": form.status.value})
    return {
        "message": f"Report marked as {form.status.value}",
        "report": next(r for r in reports if r.id == report_id),
        "stats": report_stats(reports),
    }
