"""Tests for report endpoints."""

from datetime import datetime, timedelta
from io import BytesIO
from pathlib import Path
from urllib.parse import quote

import openpyxl  # type: ignore[import-untyped]
import pytest  # type: ignore[import-not-found]
from fastapi.testclient import TestClient  # type: ignore[import-untyped]

from work_hours.api import create_app
from work_hours.api.auth import create_token_for_user
from work_hours.core.config import ConfigManager
from work_hours.core.jobs import JobRegistry
from work_hours.core.models import Job, TimeEntry
from work_hours.core.storage import StorageManager


@pytest.fixture
def test_config(temp_dir: Path) -> ConfigManager:
    """Create a test configuration with its own data directory."""
    config = ConfigManager(temp_dir / "config.yml")
    config.set("general.data_dir", str(temp_dir / "data"))
    return config


@pytest.fixture
def client(test_config: ConfigManager) -> TestClient:
    """Create a test client."""
    return TestClient(create_app(test_config))


@pytest.fixture
def auth_headers(test_config: ConfigManager) -> dict[str, str]:
    """Get authentication headers for alice."""
    token_data = create_token_for_user(test_config, "alice")
    return {"Authorization": f"Bearer {token_data['access_token']}"}


@pytest.fixture
def shifts(test_config: ConfigManager) -> tuple[Job, Job]:
    """Two jobs of alice with shifts in March 2025, and one shift in April."""
    storage = StorageManager(test_config.data_dir)
    registry = JobRegistry(storage)
    cafe = registry.create("alice", "Cafe", hourly_rate=100)
    bar = registry.create("alice", "Bar", "#ef4444", hourly_rate=60)

    def add(job: Job, start: datetime, minutes: int) -> None:
        storage.save_entry(
            TimeEntry(
                job_id=job.id,
                owner="alice",
                start_time=start,
                end_time=start + timedelta(minutes=minutes),
            )
        )

    add(cafe, datetime(2025, 3, 3, 9, 0), 90)
    add(cafe, datetime(2025, 3, 4, 9, 0), 60)
    add(bar, datetime(2025, 3, 4, 20, 0), 120)
    add(cafe, datetime(2025, 4, 1, 9, 0), 60)
    return cafe, bar


class TestDailyReport:
    """Test daily summary."""

    def test_daily(
        self, client: TestClient, auth_headers: dict[str, str], shifts: tuple[Job, Job]
    ) -> None:
        response = client.get(
            "/api/v1/reports/daily", params={"date": "2025-03-04"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "2025-03-04"
        assert data["total_duration_ms"] == 3 * 3_600_000
        assert data["total_salary"] == 220.0
        assert {j["job_name"] for j in data["jobs"]} == {"Cafe", "Bar"}

    def test_daily_without_token(self, client: TestClient, shifts: tuple[Job, Job]) -> None:
        response = client.get("/api/v1/reports/daily", params={"date": "2025-03-04"})

        assert response.status_code == 200
        assert response.json()["jobs"] == []

    def test_daily_invalid_date(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get(
            "/api/v1/reports/daily", params={"date": "04.03.2025"}, headers=auth_headers
        )

        assert response.status_code == 422


class TestMonthlyReport:
    """Test monthly summary."""

    def test_monthly(
        self, client: TestClient, auth_headers: dict[str, str], shifts: tuple[Job, Job]
    ) -> None:
        response = client.get(
            "/api/v1/reports/monthly", params={"year": 2025, "month": 3}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "2025-03"
        by_name = {j["job_name"]: j for j in data["jobs"]}
        assert by_name["Cafe"]["entries_count"] == 2
        assert by_name["Cafe"]["total_duration_formatted"] == "2:30"
        assert by_name["Cafe"]["total_salary"] == 250.0
        assert by_name["Bar"]["total_salary"] == 120.0
        assert data["total_salary"] == 370.0

    def test_month_out_of_range(self, client: TestClient, auth_headers: dict[str, str]) -> None:
        response = client.get(
            "/api/v1/reports/monthly", params={"year": 2025, "month": 13}, headers=auth_headers
        )

        assert response.status_code == 422


class TestExport:
    """Test export rows and workbook download."""

    def test_export_rows(
        self, client: TestClient, auth_headers: dict[str, str], shifts: tuple[Job, Job]
    ) -> None:
        response = client.get(
            "/api/v1/reports/export",
            params={"start_date": "2025-03-01", "end_date": "2025-03-31"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 3
        assert sum(row["salary"] for row in rows) == 370.0

    def test_export_rows_for_one_job(
        self, client: TestClient, auth_headers: dict[str, str], shifts: tuple[Job, Job]
    ) -> None:
        _, bar = shifts

        response = client.get(
            "/api/v1/reports/export",
            params={"start_date": "2025-03-01", "end_date": "2025-03-31", "job_id": bar.id},
            headers=auth_headers,
        )

        rows = response.json()
        assert [row["job_name"] for row in rows] == ["Bar"]
        assert rows[0]["duration_formatted"] == "2:00"

    def test_export_workbook(
        self, client: TestClient, auth_headers: dict[str, str], shifts: tuple[Job, Job]
    ) -> None:
        response = client.get(
            "/api/v1/reports/export.xlsx",
            params={"year": 2025, "month": 3},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "work_hours_March_2025.xlsx" in response.headers["content-disposition"]

        ws = openpyxl.load_workbook(BytesIO(response.content)).active
        assert [c.value for c in ws[1]] == [
            "Date",
            "Job",
            "Clock-in",
            "Clock-out",
            "Hours",
            "Rate",
            "Salary",
            "Notes",
        ]
        # three rows, one spacer, then totals
        assert ws.cell(6, 8).value == "Total"
        assert ws.cell(6, 7).value == 370

    def test_export_workbook_hebrew_filename(
        self,
        client: TestClient,
        auth_headers: dict[str, str],
        test_config: ConfigManager,
        shifts: tuple[Job, Job],
    ) -> None:
        test_config.set("export.locale", "he")

        response = client.get(
            "/api/v1/reports/export.xlsx",
            params={"year": 2025, "month": 3},
            headers=auth_headers,
        )

        assert response.status_code == 200
        expected = quote("שעות_עבודה_מרץ_2025.xlsx")
        assert f"filename*=UTF-8''{expected}" in response.headers["content-disposition"]

    def test_export_workbook_requires_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/reports/export.xlsx", params={"year": 2025, "month": 3})

        assert response.status_code == 401
