"""Job registry: per-user CRUD over jobs with soft delete."""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from work_hours.core.access import check_owner, require_user
from work_hours.core.exceptions import InvalidEntryError, NotFoundError
from work_hours.core.models import DEFAULT_JOB_COLOR, Job, JobStatus
from work_hours.core.storage import StorageManager

logger = logging.getLogger(__name__)

Rate = Union[Decimal, int, float, str]

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _parse_rate(hourly_rate: Rate) -> Decimal:
    """Convert an hourly rate to Decimal and validate it.

    Floats go through ``str`` so ``42.1`` stays ``Decimal("42.1")``.
    """
    try:
        rate = Decimal(str(hourly_rate))
    except InvalidOperation:
        raise InvalidEntryError(f"Invalid hourly rate: {hourly_rate!r}", field="hourly_rate")
    if not rate.is_finite() or rate < 0:
        raise InvalidEntryError("Hourly rate must be a non-negative number", field="hourly_rate")
    return rate


def _check_color(color: str) -> str:
    if not HEX_COLOR.match(color):
        raise InvalidEntryError(
            f"Color must be a hex code like #3b82f6, got {color!r}", field="color"
        )
    return color


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidEntryError("Job name must not be empty", field="name")
    return cleaned


class JobRegistry:
    """Create, edit, archive and restore the jobs of a user."""

    def __init__(self, storage: Optional[StorageManager] = None):
        """Initialize job registry.

        Args:
            storage: Storage manager instance. Creates default if None.
        """
        self.storage = storage or StorageManager()

    def list_active(self, user: Optional[str]) -> list[Job]:
        """List jobs of the user that are not archived.

        Returns an empty list when ``user`` is None.
        """
        if not user:
            return []
        return [j for j in self.storage.load_jobs(user) if j.is_active]

    def list_all(self, user: Optional[str]) -> list[Job]:
        """List every job of the user, active and archived."""
        if not user:
            return []
        return self.storage.load_jobs(user)

    def get(self, user: Optional[str], job_id: str) -> Job:
        """Get one job of the user.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the job does not exist
            NotAuthorizedError: If the job belongs to someone else
        """
        user = require_user(user, "get")
        job = self.storage.get_job(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        check_owner(job.owner, user)
        return job

    def create(
        self,
        user: Optional[str],
        name: str,
        color: str = DEFAULT_JOB_COLOR,
        hourly_rate: Rate = 0,
    ) -> Job:
        """Register a new active job.

        Args:
            user: Owner identity
            name: Job name
            color: Display color (hex)
            hourly_rate: Pay per hour, non-negative

        Returns:
            Created job

        Raises:
            UnauthenticatedError: If no user
            InvalidEntryError: If name, color or rate fails validation
        """
        user = require_user(user, "create")
        job = Job(
            name=_clean_name(name),
            owner=user,
            color=_check_color(color),
            hourly_rate=_parse_rate(hourly_rate),
            created_at=datetime.now(),
        )
        self.storage.save_job(job)
        logger.info(f"Created job {job.id} ({job.name}) for {user}")
        return job

    def update(
        self,
        user: Optional[str],
        job_id: str,
        name: str,
        color: str,
        hourly_rate: Rate,
    ) -> Job:
        """Overwrite name, color and rate of a job. Status is left untouched.

        Raises:
            UnauthenticatedError: If no user
            NotFoundError: If the job does not exist
            NotAuthorizedError: If the job belongs to someone else
            InvalidEntryError: If name, color or rate fails validation
        """
        user = require_user(user, "update")
        name = _clean_name(name)
        color = _check_color(color)
        rate = _parse_rate(hourly_rate)

        with self.storage.transaction():
            job = self.get(user, job_id)
            job.name = name
            job.color = color
            job.hourly_rate = rate
            self.storage.save_job(job)

        logger.info(f"Updated job {job.id}")
        return job

    def archive(self, user: Optional[str], job_id: str) -> Job:
        """Soft-delete a job. It stays visible in ``list_all`` and in reports."""
        return self._set_status(user, job_id, JobStatus.ARCHIVED, "archive")

    def restore(self, user: Optional[str], job_id: str) -> Job:
        """Bring an archived job back to the active list."""
        return self._set_status(user, job_id, JobStatus.ACTIVE, "restore")

    def _set_status(
        self, user: Optional[str], job_id: str, status: JobStatus, operation: str
    ) -> Job:
        user = require_user(user, operation)
        with self.storage.transaction():
            job = self.get(user, job_id)
            job.status = status
            self.storage.save_job(job)
        logger.info(f"Job {job.id} is now {status.value}")
        return job
