"""Pytest configuration and shared fixtures."""

import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from work_hours.core.jobs import JobRegistry
from work_hours.core.ledger import TimeLedger
from work_hours.core.storage import StorageManager


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests")


class FakeClock:
    """Controllable stand-in for ``datetime.now``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture  # type: ignore[misc]
def temp_dir() -> Path:
    """Create temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture  # type: ignore[misc]
def storage(temp_dir: Path) -> StorageManager:
    """Storage manager rooted in a temporary data directory."""
    return StorageManager(temp_dir / "data")


@pytest.fixture  # type: ignore[misc]
def clock() -> FakeClock:
    """Clock fixed at 2025-03-14 09:00."""
    return FakeClock(datetime(2025, 3, 14, 9, 0, 0))


@pytest.fixture  # type: ignore[misc]
def registry(storage: StorageManager) -> JobRegistry:
    return JobRegistry(storage)


@pytest.fixture  # type: ignore[misc]
def ledger(storage: StorageManager, clock: FakeClock) -> TimeLedger:
    return TimeLedger(storage, clock=clock)
