"""Tests for storage manager."""

import multiprocessing
import threading
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest  # type: ignore[import-not-found]

from work_hours.core.jobs import JobRegistry
from work_hours.core.ledger import TimeLedger
from work_hours.core.models import Job, JobStatus, TimeEntry
from work_hours.core.storage import StorageManager


def _entry(owner: str = "alice", job_id: str = "job-1", **kwargs: Any) -> TimeEntry:
    kwargs.setdefault("start_time", datetime(2025, 3, 14, 9, 0))
    return TimeEntry(job_id=job_id, owner=owner, **kwargs)


def _clock_shifts(data_dir: str, job_ids: list[str], rounds: int) -> None:
    ledger = TimeLedger(StorageManager(Path(data_dir)))
    for _ in range(rounds):
        for job_id in job_ids:
            entry = ledger.clock_in("alice", job_id)
            ledger.clock_out("alice", entry.id)


def _edit_entry(data_dir: str, entry_id: str, rounds: int) -> None:
    ledger = TimeLedger(StorageManager(Path(data_dir)))
    start = datetime(2025, 3, 1, 9, 0)
    for i in range(rounds):
        ledger.update_entry("alice", entry_id, start, start + timedelta(hours=1), f"edit {i}")


def _rename_job(data_dir: str, job_id: str, rounds: int) -> None:
    registry = JobRegistry(StorageManager(Path(data_dir)))
    for i in range(rounds):
        registry.update("alice", job_id, f"Cafe {i}", "#3b82f6", i)


class TestStorageManager:
    """Test StorageManager."""

    def test_initialization_creates_directories(self, storage: StorageManager) -> None:
        """Test that initialization creates required directories."""
        assert storage.data_dir.exists()
        assert storage.backup_dir.exists()
        assert storage.backup_dir == storage.data_dir.parent / "backups"

    def test_initialization_creates_csv_files(self, storage: StorageManager) -> None:
        """Test that initialization creates CSV files with headers."""
        assert storage.jobs_file.exists()
        assert storage.entries_file.exists()

        with open(storage.entries_file) as f:
            header = f.readline().strip()
        assert header.startswith("id,owner,job_id,start_time")

    def test_save_and_load_job(self, storage: StorageManager) -> None:
        job = Job(name="Cafe", owner="alice", hourly_rate=Decimal("45"))

        storage.save_job(job)
        jobs = storage.load_jobs()

        assert len(jobs) == 1
        assert jobs[0].id == job.id
        assert jobs[0].hourly_rate == Decimal("45")

    def test_update_existing_job(self, storage: StorageManager) -> None:
        job = Job(name="Cafe", owner="alice")
        storage.save_job(job)

        job.status = JobStatus.ARCHIVED
        storage.save_job(job)

        jobs = storage.load_jobs()
        assert len(jobs) == 1
        assert jobs[0].status is JobStatus.ARCHIVED

    def test_load_jobs_filters_by_owner(self, storage: StorageManager) -> None:
        storage.save_job(Job(name="Cafe", owner="alice"))
        storage.save_job(Job(name="Bar", owner="bob"))

        assert [j.name for j in storage.load_jobs("alice")] == ["Cafe"]
        assert len(storage.load_jobs()) == 2

    def test_get_job(self, storage: StorageManager) -> None:
        job = Job(name="Cafe", owner="alice")
        storage.save_job(job)

        assert storage.get_job(job.id) == job
        assert storage.get_job("missing") is None

    def test_entries_sorted_by_start_time(self, storage: StorageManager) -> None:
        late = _entry(start_time=datetime(2025, 3, 14, 15, 0))
        early = _entry(start_time=datetime(2025, 3, 14, 8, 0))
        storage.save_entry(late)
        storage.save_entry(early)

        assert [e.id for e in storage.load_entries()] == [early.id, late.id]

    def test_save_entry_updates_timestamp(self, storage: StorageManager) -> None:
        entry = _entry()
        entry.updated_at = datetime(2000, 1, 1)

        storage.save_entry(entry)

        assert entry.updated_at > datetime(2000, 1, 1)
        loaded = storage.get_entry(entry.id)
        assert loaded is not None
        assert loaded.updated_at == entry.updated_at

    def test_update_existing_entry(self, storage: StorageManager) -> None:
        entry = _entry()
        storage.save_entry(entry)

        entry.end_time = entry.start_time + timedelta(hours=2)
        storage.save_entry(entry)

        entries = storage.load_entries()
        assert len(entries) == 1
        assert entries[0].duration_ms == 7_200_000

    def test_find_open_entry(self, storage: StorageManager) -> None:
        closed = _entry(end_time=datetime(2025, 3, 14, 10, 0))
        open_entry = _entry(start_time=datetime(2025, 3, 14, 11, 0))
        other_job = _entry(job_id="job-2")
        for entry in (closed, open_entry, other_job):
            storage.save_entry(entry)

        found = storage.find_open_entry("alice", "job-1")
        assert found is not None
        assert found.id == open_entry.id
        assert storage.find_open_entry("bob", "job-1") is None

    def test_delete_entry(self, storage: StorageManager) -> None:
        entry = _entry()
        storage.save_entry(entry)

        assert storage.delete_entry(entry.id) is True
        assert storage.get_entry(entry.id) is None
        assert storage.delete_entry(entry.id) is False

    def test_backup(self, storage: StorageManager) -> None:
        storage.save_job(Job(name="Cafe", owner="alice"))

        backup_path = storage.backup("before-import")

        assert backup_path == storage.backup_dir / "before-import"
        assert (backup_path / "jobs.csv").exists()
        assert (backup_path / "entries.csv").exists()

    def test_notes_with_commas_and_newlines(self, storage: StorageManager) -> None:
        entry = _entry(notes='Closed register, counted "tips"\nsecond line')
        storage.save_entry(entry)

        assert storage.get_entry(entry.id).notes == entry.notes  # type: ignore[union-attr]

    def test_transaction_serializes_threads(self, storage: StorageManager) -> None:
        """Read-check-write under the lock never admits two open entries."""
        results = []

        def clock_in() -> None:
            with storage.transaction():
                if storage.find_open_entry("alice", "job-1") is None:
                    storage.save_entry(_entry())
                    results.append(True)
                else:
                    results.append(False)

        threads = [threading.Thread(target=clock_in) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 1
        assert len([e for e in storage.load_entries() if e.is_open]) == 1

    def test_nested_transaction_reuses_lock(self, storage: StorageManager) -> None:
        with storage.transaction():
            with storage.transaction():
                storage.save_entry(_entry())
            storage.save_job(Job(name="Cafe", owner="alice"))

        assert len(storage.load_entries()) == 1
        assert len(storage.load_jobs()) == 1

    def test_writes_leave_no_temp_files(self, storage: StorageManager) -> None:
        entry = _entry()
        storage.save_entry(entry)
        storage.save_job(Job(name="Cafe", owner="alice"))
        storage.delete_entry(entry.id)

        assert list(storage.data_dir.glob("*.tmp")) == []
        assert list(storage.data_dir.glob(".*.tmp")) == []

    def test_concurrent_writers_in_threads(self, storage: StorageManager) -> None:
        def add_entries(job_id: str) -> None:
            for _ in range(20):
                storage.save_entry(_entry(job_id=job_id))

        threads = [threading.Thread(target=add_entries, args=(f"job-{i}",)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(storage.load_entries()) == 80


@pytest.mark.slow
class TestConcurrentProcesses:
    """Separate processes writing to one data directory."""

    def _run(self, *processes: multiprocessing.process.BaseProcess) -> None:
        for p in processes:
            p.start()
        for p in processes:
            p.join(timeout=120)
        assert [p.exitcode for p in processes] == [0] * len(processes)

    def test_clock_cycles_and_edits_keep_every_entry(self, storage: StorageManager) -> None:
        registry = JobRegistry(storage)
        job_ids = [registry.create("alice", f"Job {i}").id for i in range(3)]
        seed = TimeLedger(storage).clock_in("alice", job_ids[0])
        TimeLedger(storage).clock_out("alice", seed.id)

        ctx = multiprocessing.get_context("spawn")
        data_dir = str(storage.data_dir)
        self._run(
            ctx.Process(target=_clock_shifts, args=(data_dir, job_ids, 10)),
            ctx.Process(target=_edit_entry, args=(data_dir, seed.id, 100)),
        )

        entries = storage.load_entries("alice")
        assert len(entries) == 1 + 10 * 3
        assert all(not e.is_open for e in entries)
        assert storage.get_entry(seed.id).notes == "edit 99"  # type: ignore[union-attr]

    def test_job_and_entry_writers_do_not_overwrite_each_other(
        self, storage: StorageManager
    ) -> None:
        registry = JobRegistry(storage)
        cafe = registry.create("alice", "Cafe")
        bar = registry.create("alice", "Bar")

        ctx = multiprocessing.get_context("spawn")
        data_dir = str(storage.data_dir)
        self._run(
            ctx.Process(target=_rename_job, args=(data_dir, cafe.id, 50)),
            ctx.Process(target=_clock_shifts, args=(data_dir, [bar.id], 20)),
        )

        assert registry.get("alice", cafe.id).name == "Cafe 49"
        assert registry.get("alice", bar.id).name == "Bar"
        assert len(storage.load_entries("alice")) == 20
