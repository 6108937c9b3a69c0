"""Aggregation of time entries into per-job summaries and export rows."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from work_hours.core.ledger import TimeLedger
from work_hours.core.models import MS_PER_HOUR, Job, TimeEntry

TWO_PLACES = Decimal("0.01")

UNKNOWN_JOB_NAME = "Unknown"


def compute_salary(duration_ms: int, hourly_rate: Decimal) -> Decimal:
    """Salary earned over a duration: ``duration_ms / 3_600_000 * hourly_rate``."""
    return Decimal(duration_ms) / Decimal(MS_PER_HOUR) * Decimal(hourly_rate)


def round_money(amount: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_hours_minutes(duration_ms: int) -> str:
    """Format a duration as ``H:MM``.

    Example:
        >>> format_hours_minutes(5_400_000)
        '1:30'
    """
    total_minutes = duration_ms // 60_000
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}:{minutes:02d}"


def format_elapsed(duration_ms: int) -> str:
    """Format a running duration as ``H:MM:SS``."""
    total_seconds = duration_ms // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First and last instant (inclusive) of a calendar month.

    Args:
        year: Calendar year
        month: Month number, 1-12

    Raises:
        ValueError: If month is out of range
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    start = datetime(year, month, 1)
    if month == 12:
        next_start = datetime(year + 1, 1, 1)
    else:
        next_start = datetime(year, month + 1, 1)
    return start, next_start - timedelta(microseconds=1)


@dataclass
class JobSummary:
    """Accumulated totals of one job over a report window."""

    job_id: str
    job_name: str
    job_color: str
    hourly_rate: Decimal
    total_duration_ms: int = 0
    total_salary: Decimal = Decimal("0")
    entries_count: int = 0
    entries: list[TimeEntry] = field(default_factory=list)

    @classmethod
    def for_job(cls, job: Job) -> "JobSummary":
        return cls(
            job_id=job.id,
            job_name=job.name,
            job_color=job.color,
            hourly_rate=job.hourly_rate,
        )

    def add(self, entry: TimeEntry) -> None:
        duration = entry.duration_ms or 0
        self.total_duration_ms += duration
        self.total_salary += compute_salary(duration, self.hourly_rate)
        self.entries_count += 1
        self.entries.append(entry)

    @property
    def total_hours(self) -> Decimal:
        return Decimal(self.total_duration_ms) / Decimal(MS_PER_HOUR)


@dataclass
class ExportRow:
    """One flat spreadsheet row describing a closed entry."""

    entry_id: str
    date: str
    job_name: str
    start_time: str
    end_time: str
    duration_ms: int
    duration_formatted: str
    duration_hours: Decimal
    hourly_rate: Decimal
    salary: Decimal
    notes: str


class ReportService:
    """Build daily, monthly and export views over a user's ledger."""

    def __init__(
        self,
        ledger: Optional[TimeLedger] = None,
        date_format: str = "%d.%m.%Y",
        time_format: str = "%H:%M",
    ):
        """Initialize report service.

        Args:
            ledger: Time ledger to read from. Creates default if None.
            date_format: strftime format for dates in export rows
            time_format: strftime format for clock times in export rows
        """
        self.ledger = ledger or TimeLedger()
        self.date_format = date_format
        self.time_format = time_format

    def _group_by_job(
        self, user: str, start: datetime, end: datetime, end_inclusive: bool
    ) -> list[JobSummary]:
        groups: dict[str, JobSummary] = {}
        for item in self.ledger.list_by_range(user, start, end):
            if not end_inclusive and item.entry.start_time >= end:
                continue
            if item.job is None:
                continue
            summary = groups.get(item.entry.job_id)
            if summary is None:
                summary = groups[item.entry.job_id] = JobSummary.for_job(item.job)
            summary.add(item.entry)
        return list(groups.values())

    def daily_summary(self, user: Optional[str], day_start: datetime) -> list[JobSummary]:
        """Group closed entries starting in [day_start, day_start + 24h) by job.

        Args:
            user: Identity of the caller. Returns [] if None
            day_start: Start of the day window

        Returns:
            One summary per job, in order of first appearance
        """
        if not user:
            return []
        day_end = day_start + timedelta(days=1)
        return self._group_by_job(user, day_start, day_end, end_inclusive=False)

    def monthly_summary(self, user: Optional[str], year: int, month: int) -> list[JobSummary]:
        """Group closed entries of a calendar month by job, with salaries.

        Args:
            user: Identity of the caller. Returns [] if None
            year: Calendar year
            month: Month number, 1-12

        Returns:
            One summary per job, in order of first appearance
        """
        if not user:
            return []
        start, end = month_bounds(year, month)
        return self._group_by_job(user, start, end, end_inclusive=True)

    def export_range(
        self,
        user: Optional[str],
        start: datetime,
        end: datetime,
        job_id: Optional[str] = None,
    ) -> list[ExportRow]:
        """Flatten closed entries in [start, end] into export rows.

        Entries whose job cannot be resolved are kept with the name
        ``Unknown`` and a rate of 0.

        Args:
            user: Identity of the caller. Returns [] if None
            start: Window start (inclusive)
            end: Window end (inclusive)
            job_id: Restrict the rows to one job

        Returns:
            Export rows ordered by start time
        """
        if not user:
            return []

        rows = []
        for item in self.ledger.list_by_range(user, start, end):
            entry = item.entry
            if job_id and entry.job_id != job_id:
                continue

            job_name = item.job.name if item.job else UNKNOWN_JOB_NAME
            hourly_rate = item.job.hourly_rate if item.job else Decimal("0")
            duration = entry.duration_ms or 0
            end_time = entry.end_time or entry.start_time

            rows.append(
                ExportRow(
                    entry_id=entry.id,
                    date=entry.start_time.strftime(self.date_format),
                    job_name=job_name,
                    start_time=entry.start_time.strftime(self.time_format),
                    end_time=end_time.strftime(self.time_format),
                    duration_ms=duration,
                    duration_formatted=format_hours_minutes(duration),
                    duration_hours=round_money(Decimal(duration) / Decimal(MS_PER_HOUR)),
                    hourly_rate=hourly_rate,
                    salary=round_money(compute_salary(duration, hourly_rate)),
                    notes=entry.notes or "",
                )
            )
        return rows

    def today_totals(self, user: Optional[str]) -> list[tuple[Job, int]]:
        """Per-job time worked today, counting open shifts up to now.

        Returns:
            (job, duration_ms) pairs in order of first appearance
        """
        now = self.ledger.clock()
        totals: dict[str, tuple[Job, int]] = {}
        for item in self.ledger.list_today(user):
            if item.job is None:
                continue
            job, duration = totals.get(item.job.id, (item.job, 0))
            totals[job.id] = (job, duration + item.entry.elapsed_ms(now))
        return list(totals.values())
