"""Tests for the job registry."""

from decimal import Decimal

import pytest  # type: ignore[import-not-found]

from work_hours.core.exceptions import (
    InvalidEntryError,
    NotAuthorizedError,
    NotFoundError,
    UnauthenticatedError,
)
from work_hours.core.jobs import JobRegistry
from work_hours.core.models import JobStatus


class TestCreate:
    """Test job creation."""

    def test_create_job(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe", "#10b981", 45)

        assert job.name == "Cafe"
        assert job.owner == "alice"
        assert job.color == "#10b981"
        assert job.hourly_rate == Decimal("45")
        assert job.status is JobStatus.ACTIVE
        assert registry.list_active("alice") == [job]

    def test_float_rate_is_kept_exact(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe", hourly_rate=42.1)
        assert job.hourly_rate == Decimal("42.1")

    def test_name_is_trimmed(self, registry: JobRegistry) -> None:
        assert registry.create("alice", "  Cafe  ").name == "Cafe"

    def test_requires_user(self, registry: JobRegistry) -> None:
        with pytest.raises(UnauthenticatedError):
            registry.create(None, "Cafe")

    @pytest.mark.parametrize("rate", [-1, "abc", "NaN", "Infinity"])  # type: ignore[misc]
    def test_rejects_invalid_rate(self, registry: JobRegistry, rate: object) -> None:
        with pytest.raises(InvalidEntryError) as exc_info:
            registry.create("alice", "Cafe", hourly_rate=rate)  # type: ignore[arg-type]
        assert exc_info.value.field == "hourly_rate"

    def test_rejects_blank_name(self, registry: JobRegistry) -> None:
        with pytest.raises(InvalidEntryError):
            registry.create("alice", "   ")

    def test_rejects_invalid_color(self, registry: JobRegistry) -> None:
        with pytest.raises(InvalidEntryError):
            registry.create("alice", "Cafe", color="blue")


class TestListing:
    """Test active and full listings."""

    def test_lists_are_per_user(self, registry: JobRegistry) -> None:
        registry.create("alice", "Cafe")
        registry.create("bob", "Bar")

        assert [j.name for j in registry.list_active("alice")] == ["Cafe"]
        assert [j.name for j in registry.list_all("bob")] == ["Bar"]

    def test_unauthenticated_reads_are_empty(self, registry: JobRegistry) -> None:
        registry.create("alice", "Cafe")

        assert registry.list_active(None) == []
        assert registry.list_all(None) == []


class TestUpdate:
    """Test job updates."""

    def test_update_overwrites_fields(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe", hourly_rate=40)

        updated = registry.update("alice", job.id, "Cafe Nord", "#ef4444", "47.5")

        assert updated.name == "Cafe Nord"
        assert updated.color == "#ef4444"
        assert updated.hourly_rate == Decimal("47.5")
        assert registry.get("alice", job.id).hourly_rate == Decimal("47.5")

    def test_update_keeps_status(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe")
        registry.archive("alice", job.id)

        updated = registry.update("alice", job.id, "Cafe", "#3b82f6", 50)

        assert updated.status is JobStatus.ARCHIVED

    def test_update_by_other_user_is_rejected(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe", hourly_rate=40)

        with pytest.raises(NotAuthorizedError):
            registry.update("bob", job.id, "Mine now", "#3b82f6", 0)

        assert registry.get("alice", job.id).name == "Cafe"

    def test_update_missing_job(self, registry: JobRegistry) -> None:
        with pytest.raises(NotFoundError):
            registry.update("alice", "missing", "Cafe", "#3b82f6", 0)


class TestArchive:
    """Test soft delete and restore."""

    def test_archive_hides_from_active_list(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe")

        archived = registry.archive("alice", job.id)

        assert archived.is_active is False
        assert registry.list_active("alice") == []
        assert [j.id for j in registry.list_all("alice")] == [job.id]

    def test_restore(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe")
        registry.archive("alice", job.id)

        restored = registry.restore("alice", job.id)

        assert restored.is_active is True
        assert [j.id for j in registry.list_active("alice")] == [job.id]

    def test_archive_by_other_user_is_rejected(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe")

        with pytest.raises(NotAuthorizedError):
            registry.archive("bob", job.id)
        with pytest.raises(NotAuthorizedError):
            registry.restore("bob", job.id)

    def test_archive_requires_user(self, registry: JobRegistry) -> None:
        job = registry.create("alice", "Cafe")

        with pytest.raises(UnauthenticatedError) as exc_info:
            registry.archive(None, job.id)
        assert "archive" in str(exc_info.value)
