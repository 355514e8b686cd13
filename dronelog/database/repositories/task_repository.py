from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row

from dronelog.database.connection import get_connection
from dronelog.tasks.base import BaseTaskRepository, LockedTask
from dronelog.tasks.exceptions import TaskStoreError
from dronelog.tasks.models import STATUS_COMPLETED, Task, TaskVerification

_TASK_COLUMNS = """
    id, status, completed_at, verification_result, verification_report_hash,
    verification_timestamp, verification_tx
"""


def _row_to_task(row: dict[str, Any]) -> Task:
    return Task(
        id=str(row["id"]),
        status=row["status"],
        completed_at=row["completed_at"],
        verification_result=row["verification_result"],
        verification_report_hash=row["verification_report_hash"],
        verification_timestamp=row["verification_timestamp"],
        verification_tx=row["verification_tx"],
    )


class PostgresLockedTask(LockedTask):
    """Task row held with SELECT ... FOR UPDATE inside an open transaction."""

    def __init__(self, conn: psycopg.Connection[Any], task: Task | None) -> None:
        self._conn = conn
        self._task = task

    @property
    def task(self) -> Task | None:
        return self._task

    def record_verification(self, verification: TaskVerification) -> bool:
        if self._task is None:
            return False
        with self._conn.cursor() as cur:
            cur.execute(
                """
                UPDATE tasks
                SET status = %s,
                    verification_result = %s,
                    verification_report_hash = %s,
                    verification_timestamp = NOW(),
                    verification_tx = %s
                WHERE id = %s
                  AND verification_result IS NULL
                  AND status = %s
                """,
                (
                    verification.status,
                    verification.result,
                    verification.report_hash,
                    verification.transaction_id,
                    self._task.id,
                    STATUS_COMPLETED,
                ),
            )
            return cur.rowcount == 1


class TaskRepository(BaseTaskRepository):
    """Database operations for the tasks table."""

    def find_by_id(self, task_id: str) -> Task | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = %s",
                        (task_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise TaskStoreError(f"Failed to load task {task_id}: {exc}") from exc

        return _row_to_task(row) if row is not None else None

    def find_most_recent_completed(self) -> Task | None:
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        f"""
                        SELECT {_TASK_COLUMNS}
                        FROM tasks
                        WHERE status = %s
                        ORDER BY completed_at DESC NULLS LAST
                        LIMIT 1
                        """,
                        (STATUS_COMPLETED,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise TaskStoreError(f"Failed to query completed tasks: {exc}") from exc

        return _row_to_task(row) if row is not None else None

    @contextmanager
    def lock(self, task_id: str) -> Generator[LockedTask, None, None]:
        """Open a transaction holding the task row until the block exits.

        A concurrent caller locking the same task waits here and then reads
        whatever the first caller committed.
        """
        try:
            with get_connection() as conn:
                with conn.transaction():
                    with conn.cursor(row_factory=dict_row) as cur:
                        cur.execute(
                            f"SELECT {_TASK_COLUMNS} FROM tasks WHERE id = %s FOR UPDATE",
                            (task_id,),
                        )
                        row = cur.fetchone()
                    task = _row_to_task(row) if row is not None else None
                    yield PostgresLockedTask(conn, task)
        except psycopg.Error as exc:
            raise TaskStoreError(f"Task {task_id} transaction failed: {exc}") from exc
