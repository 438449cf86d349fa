# File: store.py
"""Handles persistent data storage for YardOps.

The store is the only component that touches persisted state. Records live in
two collections (jobs, routing) keyed by their ids. Multi-record writes go
through a StoreBatch so a job and its routing record are always written,
updated, or deleted together.

Implementations:
- MemoryJobStore: dict-backed, used for tests and ephemeral sessions
- JsonFileJobStore: MemoryJobStore persisted as one JSON document on disk
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import copy
from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import const
from .exceptions import NotFoundError, PersistenceError
from .utils.dt_utils import dt_now_iso

if TYPE_CHECKING:
    from .type_defs import JobData

OP_SET = "set"
OP_UPDATE = "update"
OP_DELETE = "delete"


@dataclass
class StoreOperation:
    """One queued write inside a StoreBatch."""

    kind: str
    collection: str
    record_id: str
    payload: dict[str, Any] | None = None


class StoreBatch:
    """Queued writes committed all-or-nothing.

    Example:
        batch = store.batch()
        batch.set(const.COLLECTION_JOBS, job_id, job)
        batch.set(const.COLLECTION_ROUTING, routing_id, routing)
        await batch.async_commit()
    """

    def __init__(self, store: JobStore) -> None:
        """Initialize an empty batch bound to `store`."""
        self._store = store
        self._operations: list[StoreOperation] = []
        self._committed = False

    def __len__(self) -> int:
        """Return the number of queued operations."""
        return len(self._operations)

    def set(self, collection: str, record_id: str, record: dict[str, Any]) -> StoreBatch:
        """Queue a full record write (insert or replace)."""
        self._operations.append(
            StoreOperation(OP_SET, collection, record_id, copy.deepcopy(dict(record)))
        )
        return self

    def update(self, collection: str, record_id: str, changes: dict[str, Any]) -> StoreBatch:
        """Queue a partial update of an existing record."""
        self._operations.append(
            StoreOperation(OP_UPDATE, collection, record_id, copy.deepcopy(dict(changes)))
        )
        return self

    def delete(self, collection: str, record_id: str) -> StoreBatch:
        """Queue deletion of an existing record."""
        self._operations.append(StoreOperation(OP_DELETE, collection, record_id))
        return self

    async def async_commit(self) -> None:
        """Apply every queued operation, or none of them.

        Raises:
            NotFoundError: An update/delete targets a missing record.
            PersistenceError: The store could not save; nothing was applied.
        """
        if self._committed:
            raise PersistenceError("Batch has already been committed")
        self._committed = True
        if not self._operations:
            return
        await self._store.async_apply(self._operations)


class JobStore(ABC):
    """Abstract persistence for jobs and routing records.

    Reads return copies; mutating a returned record never changes the store.
    """

    def batch(self) -> StoreBatch:
        """Start a new atomic batch."""
        return StoreBatch(self)

    async def async_set(self, collection: str, record_id: str, record: dict[str, Any]) -> None:
        """Insert or replace one record."""
        await self.batch().set(collection, record_id, record).async_commit()

    async def async_update(
        self, collection: str, record_id: str, changes: dict[str, Any]
    ) -> None:
        """Merge `changes` into an existing record.

        Raises:
            NotFoundError: If the record does not exist.
        """
        await self.batch().update(collection, record_id, changes).async_commit()

    async def async_delete(self, collection: str, record_id: str) -> None:
        """Delete an existing record.

        Raises:
            NotFoundError: If the record does not exist.
        """
        await self.batch().delete(collection, record_id).async_commit()

    @abstractmethod
    async def async_get(self, collection: str, record_id: str) -> dict[str, Any]:
        """Return a copy of one record.

        Raises:
            NotFoundError: If the record does not exist.
        """

    @abstractmethod
    async def async_exists(self, collection: str, record_id: str) -> bool:
        """Return True if the record exists."""

    @abstractmethod
    async def async_query_by_series_id(self, series_id: str) -> list[JobData]:
        """Return every job of a series ordered by scheduled_date ascending."""

    @abstractmethod
    async def async_all(self, collection: str) -> list[dict[str, Any]]:
        """Return copies of every record in a collection."""

    @abstractmethod
    async def async_apply(self, operations: list[StoreOperation]) -> None:
        """Apply a committed batch atomically."""


class MemoryJobStore(JobStore):
    """Dict-backed store.

    Batches are applied to a deep copy of the data which replaces the live
    data only after `_async_persist` succeeds.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        """Initialize the store, optionally from an existing document."""
        self._data: dict[str, Any] = (
            copy.deepcopy(data) if data is not None else self.get_default_structure()
        )
        for collection in const.COLLECTIONS:
            self._data.setdefault(collection, {})

    @staticmethod
    def get_default_structure() -> dict[str, Any]:
        """Return canonical empty data structure for fresh installations."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_LAST_SAVED: None,
            },
            const.COLLECTION_JOBS: {},
            const.COLLECTION_ROUTING: {},
        }

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory document."""
        return self._data

    def _collection(self, data: dict[str, Any], collection: str) -> dict[str, Any]:
        if collection not in const.COLLECTIONS:
            raise PersistenceError(f"Unknown collection '{collection}'")
        return data.setdefault(collection, {})

    async def async_get(self, collection: str, record_id: str) -> dict[str, Any]:
        """Return a copy of one record."""
        records = self._collection(self._data, collection)
        if record_id not in records:
            raise NotFoundError(collection, record_id)
        return copy.deepcopy(records[record_id])

    async def async_exists(self, collection: str, record_id: str) -> bool:
        """Return True if the record exists."""
        return record_id in self._collection(self._data, collection)

    async def async_query_by_series_id(self, series_id: str) -> list[JobData]:
        """Return every job of a series ordered by scheduled_date ascending."""
        jobs = [
            copy.deepcopy(job)
            for job in self._collection(self._data, const.COLLECTION_JOBS).values()
            if job.get(const.DATA_JOB_SERIES_ID) == series_id
        ]
        jobs.sort(
            key=lambda job: (
                str(job.get(const.DATA_JOB_SCHEDULED_DATE, "")),
                str(job.get(const.DATA_JOB_ID, "")),
            )
        )
        return jobs

    async def async_all(self, collection: str) -> list[dict[str, Any]]:
        """Return copies of every record in a collection."""
        return [
            copy.deepcopy(record)
            for record in self._collection(self._data, collection).values()
        ]

    async def async_apply(self, operations: list[StoreOperation]) -> None:
        """Apply operations to a working copy, persist it, then swap it in."""
        working = copy.deepcopy(self._data)
        for operation in operations:
            records = self._collection(working, operation.collection)
            if operation.kind == OP_SET:
                records[operation.record_id] = copy.deepcopy(operation.payload or {})
            elif operation.kind == OP_UPDATE:
                if operation.record_id not in records:
                    raise NotFoundError(operation.collection, operation.record_id)
                records[operation.record_id].update(copy.deepcopy(operation.payload or {}))
            elif operation.kind == OP_DELETE:
                if operation.record_id not in records:
                    raise NotFoundError(operation.collection, operation.record_id)
                del records[operation.record_id]
            else:
                raise PersistenceError(f"Unknown store operation '{operation.kind}'")

        await self._async_persist(working)
        self._data = working
        const.LOGGER.debug("Store: Applied batch of %s operations", len(operations))

    async def _async_persist(self, data: dict[str, Any]) -> None:
        """Persist a fully applied document. Memory store keeps nothing on disk."""


class JsonFileJobStore(MemoryJobStore):
    """MemoryJobStore saved to a single JSON file after every commit.

    The file is written to a temporary sibling and moved into place, so a
    crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON document. Created on first save.
        """
        super().__init__()
        self._path = Path(path)

    def get_storage_path(self) -> str:
        """Get the storage file path."""
        return str(self._path)

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no file exists, initializes with an empty structure.

        Raises:
            PersistenceError: The file exists but cannot be read or parsed.
        """
        const.LOGGER.debug("JsonFileJobStore: Loading data from %s", self._path)
        try:
            existing_data = await asyncio.to_thread(self._read_file)
        except (OSError, ValueError) as err:
            const.LOGGER.error(
                "Failed to load storage from %s: %s", self._path, err
            )
            raise PersistenceError(f"Failed to load storage: {err}") from err

        if existing_data is None:
            const.LOGGER.info("No existing storage found. Initializing new data")
            self._data = self.get_default_structure()
            return

        for collection in const.COLLECTIONS:
            existing_data.setdefault(collection, {})
        existing_data.setdefault(
            const.DATA_META, {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION}
        )
        self._data = existing_data
        const.LOGGER.debug(
            "Loaded existing data from storage: %s",
            {
                "jobs": len(self._data[const.COLLECTION_JOBS]),
                "routing": len(self._data[const.COLLECTION_ROUTING]),
            },
        )

    def _read_file(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None
        with self._path.open(encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, dict):
            raise ValueError("Storage document is not a JSON object")
        return loaded

    def _write_file(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, indent=2, sort_keys=True)
        os.replace(tmp_path, self._path)

    async def _async_persist(self, data: dict[str, Any]) -> None:
        """Save the document; on failure the live data is left untouched.

        Raises:
            PersistenceError: Wrapping OSError/TypeError/ValueError from the save.
        """
        data.setdefault(const.DATA_META, {})[const.DATA_META_LAST_SAVED] = dt_now_iso()
        try:
            await asyncio.to_thread(self._write_file, data)
        except OSError as err:
            const.LOGGER.error(
                "Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._path,
            )
            raise PersistenceError(f"Failed to save storage: {err}") from err
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "Failed to save storage due to non-serializable data: %s", err
            )
            raise PersistenceError(f"Failed to save storage: {err}") from err


__all__ = [
    "JobStore",
    "JsonFileJobStore",
    "MemoryJobStore",
    "StoreBatch",
    "StoreOperation",
]
