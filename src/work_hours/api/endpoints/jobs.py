"""Job endpoints for the job registry.

Archiving is a soft delete: archived jobs disappear from ``GET /jobs/`` but
are still listed by ``GET /jobs/all`` and still count in reports.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status  # type: ignore[import-untyped]

from work_hours.api.auth import get_current_user
from work_hours.api.dependencies import get_registry
from work_hours.api.models import CreateJobRequest, JobResponse, UpdateJobRequest
from work_hours.core.jobs import JobRegistry

router = APIRouter()


@router.get("/", response_model=list[JobResponse])
async def list_active_jobs(
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> list[JobResponse]:
    """List the caller's active jobs.

    Example:
        >>> GET /api/v1/jobs/
        [
            {
                "id": "uuid",
                "name": "Cafe",
                "color": "#3b82f6",
                "hourly_rate": 45.0,
                "status": "active",
                ...
            }
        ]
    """
    return [JobResponse.from_job(j) for j in registry.list_active(user)]


@router.get("/all", response_model=list[JobResponse])
async def list_all_jobs(
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> list[JobResponse]:
    """List all of the caller's jobs, archived included."""
    return [JobResponse.from_job(j) for j in registry.list_all(user)]


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: CreateJobRequest,
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> JobResponse:
    """Create a new active job.

    Example:
        >>> POST /api/v1/jobs/
        {
            "name": "Cafe",
            "color": "#10b981",
            "hourly_rate": 45
        }
    """
    job = registry.create(user, request.name, request.color, request.hourly_rate)
    return JobResponse.from_job(job)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> JobResponse:
    """Get one job by ID."""
    return JobResponse.from_job(registry.get(user, job_id))


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    request: UpdateJobRequest,
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> JobResponse:
    """Overwrite name, color and hourly rate of a job."""
    job = registry.update(user, job_id, request.name, request.color, request.hourly_rate)
    return JobResponse.from_job(job)


@router.post("/{job_id}/archive", response_model=JobResponse)
async def archive_job(
    job_id: str,
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> JobResponse:
    """Archive (soft-delete) a job."""
    return JobResponse.from_job(registry.archive(user, job_id))


@router.post("/{job_id}/restore", response_model=JobResponse)
async def restore_job(
    job_id: str,
    registry: JobRegistry = Depends(get_registry),
    user: Optional[str] = Depends(get_current_user),
) -> JobResponse:
    """Restore an archived job."""
    return JobResponse.from_job(registry.restore(user, job_id))
