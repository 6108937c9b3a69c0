"""Core data models for work-hour tracking."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

MS_PER_HOUR = 3_600_000

DEFAULT_JOB_COLOR = "#3b82f6"


def _new_id() -> str:
    return str(uuid4())


class JobStatus(str, Enum):
    """Lifecycle status of a job. Archived jobs are soft-deleted."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class Job:
    """A billable work context owned by a single user.

    Attributes:
        name: Display name
        owner: User identifier of the owner
        color: Display color token (hex)
        hourly_rate: Pay per hour, non-negative
        id: Unique identifier
        status: Active or archived
        created_at: When the job was registered
    """

    name: str
    owner: str
    color: str = DEFAULT_JOB_COLOR
    hourly_rate: Decimal = Decimal("0")
    id: str = field(default_factory=_new_id)
    status: JobStatus = JobStatus.ACTIVE
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_active(self) -> bool:
        """Check if the job has not been archived."""
        return self.status is JobStatus.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV/JSON serialization."""
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "color": self.color,
            "hourly_rate": str(self.hourly_rate),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Create Job from dictionary (CSV/JSON deserialization)."""
        return cls(
            id=data["id"],
            owner=data["owner"],
            name=data["name"],
            color=data["color"] or DEFAULT_JOB_COLOR,
            hourly_rate=Decimal(data["hourly_rate"]) if data["hourly_rate"] else Decimal("0"),
            status=JobStatus(data.get("status") or JobStatus.ACTIVE.value),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class TimeEntry:
    """A single clock-in/clock-out record against a job.

    Attributes:
        job_id: Job this shift was worked for
        owner: User identifier of the owner
        start_time: Clock-in time
        id: Unique identifier
        end_time: Clock-out time (None while the shift is open)
        notes: Free-form notes
        created_at: When this record was created
        updated_at: Last update time
    """

    job_id: str
    owner: str
    start_time: datetime
    id: str = field(default_factory=_new_id)
    end_time: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def duration_ms(self) -> Optional[int]:
        """Duration in whole milliseconds. Returns None if the entry is open."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time) // timedelta(milliseconds=1)

    @property
    def is_open(self) -> bool:
        """Check if this entry is still clocked in."""
        return self.end_time is None

    def elapsed_ms(self, now: datetime) -> int:
        """Duration so far, counting an open entry up to ``now``."""
        if self.end_time is not None:
            return self.duration_ms or 0
        return max(0, (now - self.start_time) // timedelta(milliseconds=1))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV/JSON serialization."""
        duration = self.duration_ms
        return {
            "id": self.id,
            "owner": self.owner,
            "job_id": self.job_id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else "",
            "duration_ms": duration if duration is not None else "",
            "notes": self.notes or "",
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (CSV/JSON deserialization).

        ``duration_ms`` is derived from the bounds, so the stored column is
        ignored on load.
        """
        return cls(
            id=data["id"],
            owner=data["owner"],
            job_id=data["job_id"],
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]) if data["end_time"] else None,
            notes=data["notes"] if data["notes"] else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )


@dataclass
class EntryWithJob:
    """A time entry joined with its job (None if the job lookup failed)."""

    entry: TimeEntry
    job: Optional[Job] = None
