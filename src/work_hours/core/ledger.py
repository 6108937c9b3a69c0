"""Time entry ledger: clocking in and out against jobs."""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from work_hours.core.access import check_owner, require_user
from work_hours.core.exceptions import (
    ConflictError,
    InvalidEntryError,
    NotAuthorizedError,
    NotFoundError,
)
from work_hours.core.models import EntryWithJob, Job, TimeEntry
from work_hours.core.storage import StorageManager

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def day_bounds(day: datetime) -> tuple[datetime, datetime]:
    """Return [midnight, next midnight) of the local calendar day of ``day``."""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


class TimeLedger:
    """Record shifts of a user against their jobs.

    ``clock`` supplies "now" for clock-in, clock-out and today's window.
    """

    def __init__(self, storage: Optional[StorageManager] = None, clock: Clock = datetime.now):
        """Initialize time ledger.

        Args:
            storage: Storage manager instance. Creates default if None.
            clock: Callable returning the current local time
        """
        self.storage = storage or StorageManager()
        self.clock = clock

    def _join_jobs(self, entries: list[TimeEntry], user: str) -> list[EntryWithJob]:
        jobs: dict[str, Job] = {job.id: job for job in self.storage.load_jobs(user)}
        return [EntryWithJob(entry=entry, job=jobs.get(entry.job_id)) for entry in entries]

    def _get_owned_entry(self, user: str, entry_id: str) -> TimeEntry:
        entry = self.storage.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        check_owner(entry.owner, user)
        return entry

    def get_entry(self, user: Optional[str], entry_id: str) -> TimeEntry:
        """Get one entry of the user.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the entry does not exist
            NotAuthorizedError: If the entry belongs to someone else
        """
        user = require_user(user, "get_entry")
        return self._get_owned_entry(user, entry_id)

    def list_open(self, user: Optional[str]) -> list[EntryWithJob]:
        """List entries of the user that are still clocked in."""
        if not user:
            return []
        entries = [e for e in self.storage.load_entries(user) if e.is_open]
        return self._join_jobs(entries, user)

    def clock_in(self, user: Optional[str], job_id: str, notes: Optional[str] = None) -> TimeEntry:
        """Open a new shift for a job.

        Args:
            user: Identity of the caller
            job_id: Job to clock in to
            notes: Optional notes

        Returns:
            The open entry

        Raises:
            UnauthenticatedError: If no user
            NotAuthorizedError: If the job is missing or belongs to someone else
            ConflictError: If the user is already clocked in to this job
        """
        user = require_user(user, "clockIn")

        job = self.storage.get_job(job_id)
        if job is None or job.owner != user:
            logger.warning(f"Rejected clock-in by {user!r} to job {job_id}")
            raise NotAuthorizedError("Unauthorized job access")

        with self.storage.transaction():
            if self.storage.find_open_entry(user, job_id) is not None:
                raise ConflictError("Already clocked in to this job")

            entry = TimeEntry(
                job_id=job_id,
                owner=user,
                start_time=self.clock(),
                notes=notes or None,
            )
            self.storage.save_entry(entry)

        logger.info(f"Clocked in to job {job_id} (entry {entry.id})")
        return entry

    def clock_out(self, user: Optional[str], entry_id: str) -> TimeEntry:
        """Close an open shift at the current time.

        Returns:
            The closed entry. Its ``duration_ms`` is the shift length.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the entry does not exist
            NotAuthorizedError: If the entry belongs to someone else
            ConflictError: If the entry was already clocked out
        """
        user = require_user(user, "clockOut")

        with self.storage.transaction():
            entry = self._get_owned_entry(user, entry_id)
            if not entry.is_open:
                raise ConflictError("Time entry is already clocked out")

            entry.end_time = self.clock()
            self.storage.save_entry(entry)

        logger.info(f"Clocked out of entry {entry.id} after {entry.duration_ms} ms")
        return entry

    def list_by_range(
        self, user: Optional[str], start: datetime, end: datetime
    ) -> list[EntryWithJob]:
        """List closed entries whose start time lies in [start, end]."""
        if not user:
            return []
        entries = [
            e
            for e in self.storage.load_entries(user)
            if not e.is_open and start <= e.start_time <= end
        ]
        return self._join_jobs(entries, user)

    def list_today(self, user: Optional[str]) -> list[EntryWithJob]:
        """List open and closed entries that started today (local time)."""
        if not user:
            return []
        start, end = day_bounds(self.clock())
        entries = [e for e in self.storage.load_entries(user) if start <= e.start_time < end]
        return self._join_jobs(entries, user)

    def update_entry(
        self,
        user: Optional[str],
        entry_id: str,
        start_time: datetime,
        end_time: datetime,
        notes: Optional[str] = None,
    ) -> TimeEntry:
        """Manually set the bounds and notes of an entry.

        The duration follows from the new bounds.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the entry does not exist
            NotAuthorizedError: If the entry belongs to someone else
            InvalidEntryError: If end_time is before start_time
        """
        user = require_user(user, "updateEntry")
        if end_time < start_time:
            raise InvalidEntryError("end_time must not be before start_time", field="end_time")

        with self.storage.transaction():
            entry = self._get_owned_entry(user, entry_id)
            entry.start_time = start_time
            entry.end_time = end_time
            entry.notes = notes or None
            self.storage.save_entry(entry)

        logger.info(f"Edited entry {entry.id}")
        return entry

    def delete_entry(self, user: Optional[str], entry_id: str) -> None:
        """Permanently remove an entry.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the entry does not exist
            NotAuthorizedError: If the entry belongs to someone else
        """
        user = require_user(user, "deleteEntry")
        with self.storage.transaction():
            self._get_owned_entry(user, entry_id)
            self.storage.delete_entry(entry_id)
        logger.info(f"Deleted entry {entry_id}")
