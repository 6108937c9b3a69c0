"""Entry endpoints: clock-in, clock-out, listing and manual edits."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status  # type: ignore[import-untyped]

from work_hours.analysis.summaries import format_hours_minutes
from work_hours.api.auth import get_current_user
from work_hours.api.dependencies import get_ledger, parse_day
from work_hours.api.models import (
    ClockInRequest,
    ClockOutResponse,
    EntryResponse,
    UpdateEntryRequest,
)
from work_hours.core.ledger import TimeLedger

router = APIRouter()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def _local(value: datetime) -> datetime:
    """Convert an aware timestamp to naive local time, as entries are stored."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@router.get("/", response_model=list[EntryResponse])
async def list_entries_by_range(
    start_date: str = Query(..., pattern=DATE_PATTERN, description="First day (YYYY-MM-DD)"),
    end_date: str = Query(..., pattern=DATE_PATTERN, description="Last day (YYYY-MM-DD)"),
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> list[EntryResponse]:
    """List closed entries that started between two days, both included.

    Example:
        >>> GET /api/v1/entries/?start_date=2025-03-01&end_date=2025-03-31
    """
    start = parse_day(start_date)
    end = parse_day(end_date, end_of_day=True)
    return [EntryResponse.from_item(item) for item in ledger.list_by_range(user, start, end)]


@router.get("/open", response_model=list[EntryResponse])
async def list_open_entries(
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> list[EntryResponse]:
    """List entries that are still clocked in."""
    return [EntryResponse.from_item(item) for item in ledger.list_open(user)]


@router.get("/today", response_model=list[EntryResponse])
async def list_today_entries(
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> list[EntryResponse]:
    """List entries (open or closed) that started today."""
    return [EntryResponse.from_item(item) for item in ledger.list_today(user)]


@router.post("/clock-in", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def clock_in(
    request: ClockInRequest,
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> EntryResponse:
    """Open a shift on a job.

    Raises 409 if the caller is already clocked in to the job.

    Example:
        >>> POST /api/v1/entries/clock-in
        {
            "job_id": "uuid",
            "notes": "Morning shift"
        }
    """
    entry = ledger.clock_in(user, request.job_id, request.notes)
    return EntryResponse.from_entry(entry)


@router.post("/{entry_id}/clock-out", response_model=ClockOutResponse)
async def clock_out(
    entry_id: str,
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> ClockOutResponse:
    """Close an open shift now and return its duration."""
    entry = ledger.clock_out(user, entry_id)
    duration = entry.duration_ms or 0
    return ClockOutResponse(
        duration_ms=duration,
        duration_formatted=format_hours_minutes(duration),
        entry=EntryResponse.from_entry(entry),
    )


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: str,
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> EntryResponse:
    """Get a single entry by ID."""
    return EntryResponse.from_entry(ledger.get_entry(user, entry_id))


@router.put("/{entry_id}", response_model=EntryResponse)
async def update_entry(
    entry_id: str,
    request: UpdateEntryRequest,
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> EntryResponse:
    """Set start, end and notes of an entry. The duration is recomputed."""
    entry = ledger.update_entry(
        user, entry_id, _local(request.start_time), _local(request.end_time), request.notes
    )
    return EntryResponse.from_entry(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: str,
    ledger: TimeLedger = Depends(get_ledger),
    user: Optional[str] = Depends(get_current_user),
) -> Response:
    """Delete an entry permanently."""
    ledger.delete_entry(user, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
