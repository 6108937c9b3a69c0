"""Core functionality for work-hour tracking."""

from work_hours.core.jobs import JobRegistry
from work_hours.core.ledger import TimeLedger
from work_hours.core.models import EntryWithJob, Job, JobStatus, TimeEntry

__all__ = ["Job", "JobStatus", "TimeEntry", "EntryWithJob", "JobRegistry", "TimeLedger"]
