"""Pydantic models for API requests and responses.

Money amounts are serialized as floats; durations as integer milliseconds.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field  # type: ignore[import-untyped]

from work_hours.analysis.summaries import format_hours_minutes

HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"

# ============================================================================
# Response Models
# ============================================================================


class JobResponse(BaseModel):
    """Response model for job."""

    id: str
    name: str
    color: str
    hourly_rate: float
    status: str
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True

    @classmethod
    def from_job(cls, job):  # type: ignore[no-untyped-def]
        """Create response from Job model."""
        return cls(
            id=job.id,
            name=job.name,
            color=job.color,
            hourly_rate=float(job.hourly_rate),
            status=job.status.value,
            is_active=job.is_active,
            created_at=job.created_at,
        )


class EntryResponse(BaseModel):
    """Response model for time entry, optionally joined with its job."""

    id: str
    job_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_ms: Optional[int] = None
    duration_formatted: Optional[str] = None
    notes: Optional[str] = None
    job: Optional[JobResponse] = None

    class Config:
        """Pydantic configuration."""

        from_attributes = True

    @classmethod
    def from_entry(cls, entry, job=None):  # type: ignore[no-untyped-def]
        """Create response from TimeEntry model.

        Args:
            entry: TimeEntry instance from core.models
            job: Joined Job, if any
        """
        duration = entry.duration_ms
        return cls(
            id=entry.id,
            job_id=entry.job_id,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration_ms=duration,
            duration_formatted=format_hours_minutes(duration) if duration is not None else None,
            notes=entry.notes,
            job=JobResponse.from_job(job) if job is not None else None,
        )

    @classmethod
    def from_item(cls, item):  # type: ignore[no-untyped-def]
        """Create response from an EntryWithJob pair."""
        return cls.from_entry(item.entry, item.job)


class ClockOutResponse(BaseModel):
    """Response model for clock-out."""

    duration_ms: int
    duration_formatted: str
    entry: EntryResponse


class JobSummaryResponse(BaseModel):
    """Per-job totals over a report window."""

    job_id: str
    job_name: str
    job_color: str
    hourly_rate: float
    total_duration_ms: int
    total_duration_formatted: str
    total_hours: float
    total_salary: float
    entries_count: int
    entries: list[EntryResponse] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary):  # type: ignore[no-untyped-def]
        """Create response from a JobSummary."""
        return cls(
            job_id=summary.job_id,
            job_name=summary.job_name,
            job_color=summary.job_color,
            hourly_rate=float(summary.hourly_rate),
            total_duration_ms=summary.total_duration_ms,
            total_duration_formatted=format_hours_minutes(summary.total_duration_ms),
            total_hours=round(float(summary.total_hours), 2),
            total_salary=round(float(summary.total_salary), 2),
            entries_count=summary.entries_count,
            entries=[EntryResponse.from_entry(e) for e in summary.entries],
        )


class SummaryReportResponse(BaseModel):
    """Response model for daily and monthly summaries."""

    period: str
    start_date: datetime
    end_date: datetime
    total_duration_ms: int
    total_salary: float
    jobs: list[JobSummaryResponse]


class ExportRowResponse(BaseModel):
    """One flattened export row."""

    entry_id: str
    date: str
    job_name: str
    start_time: str
    end_time: str
    duration_ms: int
    duration_formatted: str
    duration_hours: float
    hourly_rate: float
    salary: float
    notes: str

    @classmethod
    def from_row(cls, row):  # type: ignore[no-untyped-def]
        """Create response from an ExportRow."""
        return cls(
            entry_id=row.entry_id,
            date=row.date,
            job_name=row.job_name,
            start_time=row.start_time,
            end_time=row.end_time,
            duration_ms=row.duration_ms,
            duration_formatted=row.duration_formatted,
            duration_hours=float(row.duration_hours),
            hourly_rate=float(row.hourly_rate),
            salary=float(row.salary),
            notes=row.notes,
        )


# ============================================================================
# Request Models
# ============================================================================


class CreateJobRequest(BaseModel):
    """Request model for creating a job."""

    name: str = Field(..., min_length=1, max_length=200, description="Job name")
    color: str = Field("#3b82f6", pattern=HEX_COLOR, description="Hex color code")
    hourly_rate: float = Field(0, ge=0, description="Pay per hour")


class UpdateJobRequest(BaseModel):
    """Request model for updating a job. All three fields are overwritten."""

    name: str = Field(..., min_length=1, max_length=200)
    color: str = Field(..., pattern=HEX_COLOR)
    hourly_rate: float = Field(..., ge=0)


class ClockInRequest(BaseModel):
    """Request model for clocking in."""

    job_id: str = Field(..., min_length=1, description="Job to clock in to")
    notes: Optional[str] = Field(None, max_length=5000, description="Shift notes")


class UpdateEntryRequest(BaseModel):
    """Request model for manually editing an entry."""

    start_time: datetime
    end_time: datetime
    notes: Optional[str] = Field(None, max_length=5000)


# ============================================================================
# System Models
# ============================================================================


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status (healthy, degraded, unhealthy)")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")


class StatusResponse(BaseModel):
    """Response model for system status."""

    api_enabled: bool
    authentication_enabled: bool
    cors_enabled: bool
    authenticated: bool
    open_entries: int
    uptime_seconds: float


# ============================================================================
# Authentication Models
# ============================================================================


class TokenResponse(BaseModel):
    """Response model for authentication token."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token expiry in seconds")


class ErrorResponse(BaseModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Machine-readable error code")
