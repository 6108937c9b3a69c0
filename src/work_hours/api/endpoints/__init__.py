"""API endpoints.

Each module defines a FastAPI router that is included in the main application.

Available routers:
- system: Health checks and system status
- jobs: Job registry
- entries: Clock-in, clock-out and entry editing
- reports: Daily and monthly summaries and exports
"""

__all__ = ["system", "jobs", "entries", "reports"]

from work_hours.api.endpoints import entries, jobs, reports, system  # noqa: F401
