"""Report endpoints: daily and monthly summaries, export rows and workbooks."""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import (  # type: ignore[import-untyped]
    APIRouter,
    Depends,
    HTTPException,
    Query,
    Response,
    status,
)

from work_hours.analysis.summaries import JobSummary, ReportService, month_bounds
from work_hours.api.auth import get_current_user
from work_hours.api.dependencies import get_config, get_reports, parse_day
from work_hours.api.models import ExportRowResponse, JobSummaryResponse, SummaryReportResponse
from work_hours.core.config import ConfigManager
from work_hours.core.ledger import day_bounds
from work_hours.export_import import ExcelExporter, export_filename

router = APIRouter()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _summary_response(
    summaries: list[JobSummary], period: str, start: datetime, end: datetime
) -> SummaryReportResponse:
    return SummaryReportResponse(
        period=period,
        start_date=start,
        end_date=end,
        total_duration_ms=sum(s.total_duration_ms for s in summaries),
        total_salary=round(float(sum((s.total_salary for s in summaries), Decimal("0"))), 2),
        jobs=[JobSummaryResponse.from_summary(s) for s in summaries],
    )


@router.get("/daily", response_model=SummaryReportResponse)
async def daily_summary(
    date: Optional[str] = Query(None, pattern=DATE_PATTERN, description="Day (default: today)"),
    reports: ReportService = Depends(get_reports),
    user: Optional[str] = Depends(get_current_user),
) -> SummaryReportResponse:
    """Per-job totals of closed shifts that started on one day.

    Example:
        >>> GET /api/v1/reports/daily?date=2025-03-14
    """
    day_start = parse_day(date) if date else day_bounds(reports.ledger.clock())[0]
    _, day_end = day_bounds(day_start)
    summaries = reports.daily_summary(user, day_start)
    return _summary_response(summaries, day_start.strftime("%Y-%m-%d"), day_start, day_end)


@router.get("/monthly", response_model=SummaryReportResponse)
async def monthly_summary(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    reports: ReportService = Depends(get_reports),
    user: Optional[str] = Depends(get_current_user),
) -> SummaryReportResponse:
    """Per-job totals and salary for a calendar month.

    Example:
        >>> GET /api/v1/reports/monthly?year=2025&month=3
    """
    start, end = month_bounds(year, month)
    summaries = reports.monthly_summary(user, year, month)
    return _summary_response(summaries, f"{year:04d}-{month:02d}", start, end)


@router.get("/export", response_model=list[ExportRowResponse])
async def export_rows(
    start_date: str = Query(..., pattern=DATE_PATTERN),
    end_date: str = Query(..., pattern=DATE_PATTERN),
    job_id: Optional[str] = Query(None, description="Restrict to one job"),
    reports: ReportService = Depends(get_reports),
    user: Optional[str] = Depends(get_current_user),
) -> list[ExportRowResponse]:
    """Flat export rows for closed shifts between two days, both included."""
    start = parse_day(start_date)
    end = parse_day(end_date, end_of_day=True)
    rows = reports.export_range(user, start, end, job_id)
    return [ExportRowResponse.from_row(row) for row in rows]


@router.get("/export.xlsx")
async def export_workbook(
    year: int = Query(..., ge=1970, le=9999),
    month: int = Query(..., ge=1, le=12),
    job_id: Optional[str] = Query(None, description="Restrict to one job"),
    reports: ReportService = Depends(get_reports),
    config: ConfigManager = Depends(get_config),
    user: Optional[str] = Depends(get_current_user),
) -> Response:
    """Download a month of shifts as an Excel workbook with a totals row.

    The file name carries the localized month name, e.g.
    ``work_hours_March_2025.xlsx``.
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Called exportWorkbook without authentication present",
            headers={"WWW-Authenticate": "Bearer"},
        )

    start, end = month_bounds(year, month)
    rows = reports.export_range(user, start, end, job_id)

    filename = export_filename(
        year,
        month,
        locale=config.get("export.locale", "en"),
        prefix=config.get("export.filename_prefix"),
    )
    exporter = ExcelExporter(
        Path(filename), currency_symbol=config.get("export.currency_symbol", "₪")
    )
    content = exporter.render(rows)

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
