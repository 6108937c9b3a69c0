"""REST API for Work Hours.

This module provides a FastAPI-based REST API over the job registry, the
time entry ledger and the reports. The API is disabled by default and must
be explicitly enabled in the configuration.

Usage:
    # Enable API
    work-hours config set api.enabled true

    # Generate token
    work-hours api token create

    # Start server
    work-hours api serve

    # Access API docs
    http://localhost:8000/docs
"""

__all__ = ["create_app", "run_server"]

from work_hours.api.server import create_app, run_server  # noqa: F401
