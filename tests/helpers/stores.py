"""Store doubles for YardOps tests."""

from __future__ import annotations

from typing import Any

from yardops.exceptions import PersistenceError
from yardops.store import MemoryJobStore


class FailingJobStore(MemoryJobStore):
    """Memory store whose next save can be made to fail.

    Set `fail_next_save` to fail the next commit, or `fail_after_saves` to
    let that many commits through before failing one.
    """

    def __init__(self) -> None:
        super().__init__()
        self.fail_next_save = False
        self.fail_after_saves: int | None = None

    async def _async_persist(self, data: dict[str, Any]) -> None:
        if self.fail_after_saves is not None:
            if self.fail_after_saves > 0:
                self.fail_after_saves -= 1
                return
            self.fail_after_saves = None
            raise PersistenceError("disk full")
        if self.fail_next_save:
            self.fail_next_save = False
            raise PersistenceError("disk full")
