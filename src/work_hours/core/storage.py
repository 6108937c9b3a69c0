"""CSV storage manager with atomic operations and validation."""

import csv
import logging
import os
import shutil
import sys
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from work_hours.core.models import Job, TimeEntry

logger = logging.getLogger(__name__)

JOB_FIELDNAMES = [
    "id",
    "owner",
    "name",
    "color",
    "hourly_rate",
    "status",
    "created_at",
]

ENTRY_FIELDNAMES = [
    "id",
    "owner",
    "job_id",
    "start_time",
    "end_time",
    "duration_ms",
    "notes",
    "created_at",
    "updated_at",
]


def _lock_file(file_obj: Any, exclusive: bool = True) -> None:
    """Lock a file in a cross-platform way.

    Args:
        file_obj: File object to lock
        exclusive: If True, acquire exclusive lock; if False, acquire shared lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        mode = msvcrt.LK_LOCK if exclusive else msvcrt.LK_RLCK
        msvcrt.locking(file_obj.fileno(), mode, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        mode = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(file_obj.fileno(), mode)


def _unlock_file(file_obj: Any) -> None:
    """Unlock a file in a cross-platform way.

    Args:
        file_obj: File object to unlock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Manages CSV storage for jobs and time entries with atomic operations.

    Records of every user live in the same files; each row carries an
    ``owner`` column and all query methods filter on it.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.work-hours/data
        """
        if data_dir is None:
            data_dir = Path.home() / ".work-hours" / "data"

        self.data_dir = Path(data_dir)
        self.jobs_file = self.data_dir / "jobs.csv"
        self.entries_file = self.data_dir / "entries.csv"
        self.lock_path = self.data_dir / ".lock"
        self.backup_dir = self.data_dir.parent / "backups"

        # Per-thread nesting depth of transaction()
        self._held = threading.local()

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

        self._initialize_files()

    def _initialize_files(self) -> None:
        """Create CSV files with headers if they don't exist."""
        with self.transaction():
            if not self.jobs_file.exists():
                self._write_csv_atomic(self.jobs_file, JOB_FIELDNAMES, [])
            if not self.entries_file.exists():
                self._write_csv_atomic(self.entries_file, ENTRY_FIELDNAMES, [])

    def _write_csv_atomic(
        self, file_path: Path, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Write CSV file atomically using a uniquely named temp file and rename.

        Callers hold the store lock (see ``transaction``).

        Args:
            file_path: Target file path
            fieldnames: CSV field names
            rows: List of row dictionaries
        """
        fd, temp_name = tempfile.mkstemp(
            dir=file_path.parent, prefix=f".{file_path.stem}.", suffix=".tmp"
        )
        temp_file = Path(temp_name)

        try:
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

            os.replace(temp_file, file_path)

        except Exception:
            temp_file.unlink(missing_ok=True)
            raise

    def _read_csv(self, file_path: Path) -> list[dict[str, Any]]:
        """Read CSV file with locking.

        Args:
            file_path: CSV file to read

        Returns:
            List of row dictionaries
        """
        if not file_path.exists():
            return []

        with open(file_path, encoding="utf-8", newline="") as f:
            _lock_file(f, exclusive=False)

            try:
                reader = csv.DictReader(f)
                rows = list(reader)
            finally:
                _unlock_file(f)

        return rows

    @contextmanager
    def transaction(self) -> Iterator["StorageManager"]:
        """Hold the store's exclusive lock across a read-check-write sequence.

        Every write takes this lock, so other processes and threads writing
        to the same data directory block until it is released. Nested calls
        from the same thread reuse the lock already held.

        Example:
            >>> with storage.transaction():
            ...     if not storage.find_open_entry(user, job_id):
            ...         storage.save_entry(entry)
        """
        depth = getattr(self._held, "depth", 0)
        if depth:
            self._held.depth = depth + 1
            try:
                yield self
            finally:
                self._held.depth = depth
            return

        with open(self.lock_path, "a+", encoding="utf-8") as lock:
            _lock_file(lock, exclusive=True)
            self._held.depth = 1
            try:
                yield self
            finally:
                self._held.depth = 0
                _unlock_file(lock)

    def backup(self, label: Optional[str] = None) -> Path:
        """Create backup of all data files.

        Args:
            label: Optional label for backup. Defaults to timestamp

        Returns:
            Path to backup directory
        """
        if label is None:
            label = datetime.now().strftime("%Y%m%d_%H%M%S")

        backup_path = self.backup_dir / label
        backup_path.mkdir(parents=True, exist_ok=True)

        for file in [self.jobs_file, self.entries_file]:
            if file.exists():
                shutil.copy2(file, backup_path / file.name)

        logger.info(f"Backed up data files to {backup_path}")
        return backup_path

    # Job operations

    def save_job(self, job: Job) -> None:
        """Save or update a job.

        Args:
            job: Job to save
        """
        job_dict = job.to_dict()

        with self.transaction():
            jobs = self._read_csv(self.jobs_file)
            for i, row in enumerate(jobs):
                if row["id"] == job.id:
                    jobs[i] = job_dict
                    break
            else:
                jobs.append(job_dict)

            self._write_csv_atomic(self.jobs_file, JOB_FIELDNAMES, jobs)

    def load_jobs(self, owner: Optional[str] = None) -> list[Job]:
        """Load jobs, optionally only those of one owner.

        Args:
            owner: Owner to filter by. Loads every job if None

        Returns:
            List of Job objects in creation order
        """
        rows = self._read_csv(self.jobs_file)
        jobs = [Job.from_dict(row) for row in rows]
        if owner is not None:
            jobs = [j for j in jobs if j.owner == owner]
        return jobs

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get job by ID regardless of owner.

        Args:
            job_id: Job ID

        Returns:
            Job or None if not found
        """
        for job in self.load_jobs():
            if job.id == job_id:
                return job
        return None

    # Entry operations

    def save_entry(self, entry: TimeEntry) -> None:
        """Save or update an entry.

        Args:
            entry: Entry to save
        """
        entry.updated_at = datetime.now()
        entry_dict = entry.to_dict()

        with self.transaction():
            entries = self._read_csv(self.entries_file)
            for i, row in enumerate(entries):
                if row["id"] == entry.id:
                    entries[i] = entry_dict
                    break
            else:
                entries.append(entry_dict)

            self._write_csv_atomic(self.entries_file, ENTRY_FIELDNAMES, entries)

    def load_entries(self, owner: Optional[str] = None) -> list[TimeEntry]:
        """Load entries sorted by start time (oldest first).

        Args:
            owner: Owner to filter by. Loads every entry if None

        Returns:
            List of TimeEntry objects
        """
        rows = self._read_csv(self.entries_file)
        entries = [TimeEntry.from_dict(row) for row in rows]
        if owner is not None:
            entries = [e for e in entries if e.owner == owner]
        entries.sort(key=lambda e: e.start_time)
        return entries

    def get_entry(self, entry_id: str) -> Optional[TimeEntry]:
        """Get entry by ID regardless of owner.

        Args:
            entry_id: Entry ID

        Returns:
            TimeEntry or None if not found
        """
        for row in self._read_csv(self.entries_file):
            if row["id"] == entry_id:
                return TimeEntry.from_dict(row)
        return None

    def find_open_entry(self, owner: str, job_id: str) -> Optional[TimeEntry]:
        """Get the open entry of an owner for a job (if any).

        Args:
            owner: Owner identifier
            job_id: Job ID

        Returns:
            Open entry or None
        """
        for entry in self.load_entries(owner):
            if entry.job_id == job_id and entry.is_open:
                return entry
        return None

    def delete_entry(self, entry_id: str) -> bool:
        """Delete an entry by ID.

        Args:
            entry_id: ID of entry to delete

        Returns:
            True if entry was deleted, False if not found
        """
        with self.transaction():
            entries = self._read_csv(self.entries_file)
            remaining = [e for e in entries if e["id"] != entry_id]

            if len(remaining) == len(entries):
                return False

            self._write_csv_atomic(self.entries_file, ENTRY_FIELDNAMES, remaining)
        return True
