"""Tests for the job store - batches, queries, JSON persistence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from tests.helpers import FailingJobStore
from yardops import const
from yardops.exceptions import NotFoundError, PersistenceError
from yardops.store import JsonFileJobStore, MemoryJobStore


def _job(job_id: str, series_id: str, date: str) -> dict[str, Any]:
    return {
        const.DATA_JOB_ID: job_id,
        const.DATA_JOB_SERIES_ID: series_id,
        const.DATA_JOB_SCHEDULED_DATE: date,
    }


# =============================================================================
# TEST: BASIC CRUD
# =============================================================================


class TestMemoryStore:
    """Test MemoryJobStore reads and writes."""

    async def test_get_missing_raises(self) -> None:
        """Unknown ids raise NotFoundError."""
        store = MemoryJobStore()
        with pytest.raises(NotFoundError):
            await store.async_get(const.COLLECTION_JOBS, "nope")

    async def test_set_get_update_delete(self) -> None:
        """Records can be created, merged, and removed."""
        store = MemoryJobStore()
        await store.async_set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        await store.async_update(const.COLLECTION_JOBS, "a", {const.DATA_JOB_NOTES: "hi"})
        record = await store.async_get(const.COLLECTION_JOBS, "a")
        assert record[const.DATA_JOB_NOTES] == "hi"
        assert record[const.DATA_JOB_SCHEDULED_DATE] == "2024-01-01"

        await store.async_delete(const.COLLECTION_JOBS, "a")
        assert not await store.async_exists(const.COLLECTION_JOBS, "a")

    async def test_update_missing_raises(self) -> None:
        """Updating an absent record is NotFound."""
        store = MemoryJobStore()
        with pytest.raises(NotFoundError):
            await store.async_update(const.COLLECTION_JOBS, "a", {})

    async def test_returned_records_are_copies(self) -> None:
        """Mutating a read does not change the store."""
        store = MemoryJobStore()
        await store.async_set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        record = await store.async_get(const.COLLECTION_JOBS, "a")
        record[const.DATA_JOB_SCHEDULED_DATE] = "1999-01-01"
        again = await store.async_get(const.COLLECTION_JOBS, "a")
        assert again[const.DATA_JOB_SCHEDULED_DATE] == "2024-01-01"

    async def test_query_by_series_sorted(self) -> None:
        """Series query returns only that series, oldest first."""
        store = MemoryJobStore()
        await store.async_set(const.COLLECTION_JOBS, "c", _job("c", "s", "2024-01-15"))
        await store.async_set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        await store.async_set(const.COLLECTION_JOBS, "x", _job("x", "other", "2024-01-02"))
        await store.async_set(const.COLLECTION_JOBS, "b", _job("b", "s", "2024-01-08"))
        jobs = await store.async_query_by_series_id("s")
        assert [j[const.DATA_JOB_ID] for j in jobs] == ["a", "b", "c"]


# =============================================================================
# TEST: BATCHES
# =============================================================================


class TestBatch:
    """Test all-or-nothing batch commits."""

    async def test_batch_commits_all(self) -> None:
        """Every queued write lands."""
        store = MemoryJobStore()
        batch = store.batch()
        batch.set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        batch.set(const.COLLECTION_ROUTING, "r", {const.DATA_ROUTING_JOB_ID: "a"})
        assert len(batch) == 2
        await batch.async_commit()
        assert await store.async_exists(const.COLLECTION_JOBS, "a")
        assert await store.async_exists(const.COLLECTION_ROUTING, "r")

    async def test_missing_record_aborts_whole_batch(self) -> None:
        """A bad update cancels the set queued before it."""
        store = MemoryJobStore()
        batch = store.batch()
        batch.set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        batch.update(const.COLLECTION_ROUTING, "missing", {"x": 1})
        with pytest.raises(NotFoundError):
            await batch.async_commit()
        assert not await store.async_exists(const.COLLECTION_JOBS, "a")

    async def test_failed_save_rolls_back(self) -> None:
        """A persistence failure leaves the previous state."""
        store = FailingJobStore()
        await store.async_set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        store.fail_next_save = True
        batch = store.batch()
        batch.delete(const.COLLECTION_JOBS, "a")
        batch.set(const.COLLECTION_JOBS, "b", _job("b", "s", "2024-01-08"))
        with pytest.raises(PersistenceError):
            await batch.async_commit()
        assert await store.async_exists(const.COLLECTION_JOBS, "a")
        assert not await store.async_exists(const.COLLECTION_JOBS, "b")

    async def test_batch_commits_once(self) -> None:
        """Re-committing a batch is refused."""
        store = MemoryJobStore()
        batch = store.batch().set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))
        await batch.async_commit()
        with pytest.raises(PersistenceError):
            await batch.async_commit()


# =============================================================================
# TEST: JSON FILE STORE
# =============================================================================


class TestJsonFileStore:
    """Test JsonFileJobStore persistence."""

    async def test_round_trip(self, tmp_path: Path) -> None:
        """Data written by one store instance loads in the next."""
        path = tmp_path / "yardops.json"
        store = JsonFileJobStore(path)
        await store.async_initialize()
        await store.async_set(const.COLLECTION_JOBS, "a", _job("a", "s", "2024-01-01"))

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document[const.DATA_META][const.DATA_META_SCHEMA_VERSION] == const.SCHEMA_VERSION
        assert "a" in document[const.COLLECTION_JOBS]

        reloaded = JsonFileJobStore(path)
        await reloaded.async_initialize()
        record = await reloaded.async_get(const.COLLECTION_JOBS, "a")
        assert record[const.DATA_JOB_SCHEDULED_DATE] == "2024-01-01"

    async def test_missing_file_starts_empty(self, tmp_path: Path) -> None:
        """No file yet means an empty default structure."""
        store = JsonFileJobStore(tmp_path / "new.json")
        await store.async_initialize()
        assert await store.async_all(const.COLLECTION_JOBS) == []

    async def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        """Unparseable JSON is a PersistenceError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileJobStore(path)
        with pytest.raises(PersistenceError):
            await store.async_initialize()

    async def test_unserializable_record_rolls_back(self, tmp_path: Path) -> None:
        """A record json cannot encode fails the commit and changes nothing."""
        store = JsonFileJobStore(tmp_path / "yardops.json")
        await store.async_initialize()
        with pytest.raises(PersistenceError):
            await store.async_set(const.COLLECTION_JOBS, "a", {"bad": object()})
        assert not await store.async_exists(const.COLLECTION_JOBS, "a")
