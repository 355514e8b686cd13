import threading
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

from dronelog.tasks.base import BaseTaskRepository, LockedTask
from dronelog.tasks.models import STATUS_COMPLETED, Task, TaskVerification


class InMemoryLockedTask(LockedTask):
    def __init__(self, task: Task | None) -> None:
        self._task = task
        self.staged: Task | None = None

    @property
    def task(self) -> Task | None:
        return self._task

    def record_verification(self, verification: TaskVerification) -> bool:
        if self._task is None or self._task.is_verified or self._task.status != STATUS_COMPLETED:
            return False
        self.staged = replace(
            self._task,
            status=verification.status,
            verification_result=verification.result,
            verification_report_hash=verification.report_hash,
            verification_timestamp=datetime.now(timezone.utc),
            verification_tx=verification.transaction_id,
        )
        return True


class InMemoryTaskRepository(BaseTaskRepository):
    """Task store with the same lock + write-once contract as TaskRepository."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks: dict[str, Task] = {task.id: task for task in tasks or []}
        self.writes = 0
        self._guard = threading.Lock()
        self._row_locks: dict[str, threading.Lock] = {}

    def find_by_id(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def find_most_recent_completed(self) -> Task | None:
        completed = [
            t for t in self.tasks.values()
            if t.status == STATUS_COMPLETED and t.completed_at is not None
        ]
        return max(completed, key=lambda t: t.completed_at, default=None)

    @contextmanager
    def lock(self, task_id: str) -> Generator[LockedTask, None, None]:
        with self._guard:
            row_lock = self._row_locks.setdefault(task_id, threading.Lock())
        with row_lock:
            locked = InMemoryLockedTask(self.tasks.get(task_id))
            yield locked
            if locked.staged is not None:
                self.tasks[task_id] = locked.staged
                self.writes += 1


@pytest.fixture()
def task_store_factory() -> type[InMemoryTaskRepository]:
    """In-memory task store class; build it with a list of Task objects."""
    return InMemoryTaskRepository


@pytest.fixture()
def bucket_root(tmp_path: Path) -> Path:
    """A local object store with one log object at drone-logs/logs/flight-001.log."""
    root = tmp_path / "buckets"
    target = root / "drone-logs" / "logs" / "flight-001.log"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"hello drone")
    return root
