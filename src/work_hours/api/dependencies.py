"""Dependency injection for FastAPI endpoints.

These dependencies hand out the core components (configuration, storage,
job registry, ledger and report service) built from the app's config.
"""

from datetime import datetime, timedelta

from fastapi import HTTPException, Request, status  # type: ignore[import-untyped]

from work_hours.analysis.summaries import ReportService
from work_hours.core.config import ConfigManager
from work_hours.core.jobs import JobRegistry
from work_hours.core.ledger import TimeLedger
from work_hours.core.storage import StorageManager


def get_config(request: Request = None) -> ConfigManager:  # type: ignore[assignment,misc]
    """Get configuration manager instance.

    Args:
        request: FastAPI Request object (when used as dependency)

    Returns:
        ConfigManager instance from app state or new instance
    """
    if request is not None and hasattr(request, "app"):
        if hasattr(request.app.state, "config"):
            config: ConfigManager = request.app.state.config
            return config
    return ConfigManager()


def get_storage(request: Request = None) -> StorageManager:  # type: ignore[assignment,misc]
    """Get storage instance rooted at ``general.data_dir``."""
    return StorageManager(get_config(request).data_dir)


def get_registry(request: Request = None) -> JobRegistry:  # type: ignore[assignment,misc]
    """Get job registry instance."""
    return JobRegistry(get_storage(request))


def get_ledger(request: Request = None) -> TimeLedger:  # type: ignore[assignment,misc]
    """Get time ledger instance."""
    return TimeLedger(get_storage(request))


def get_reports(request: Request = None) -> ReportService:  # type: ignore[assignment,misc]
    """Get report service using the configured date and time formats."""
    config = get_config(request)
    return ReportService(
        TimeLedger(StorageManager(config.data_dir)),
        date_format=config.get("general.date_format", "%d.%m.%Y"),
        time_format=config.get("general.time_format", "%H:%M"),
    )


def parse_day(value: str, end_of_day: bool = False) -> datetime:
    """Parse a ``YYYY-MM-DD`` query value.

    Args:
        value: Date string
        end_of_day: Return the last instant of the day instead of midnight

    Raises:
        HTTPException: 422 if the value is not a valid date
    """
    try:
        day = datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid date (expected YYYY-MM-DD): {value}",
        )
    if end_of_day:
        return day + timedelta(days=1) - timedelta(microseconds=1)
    return day
