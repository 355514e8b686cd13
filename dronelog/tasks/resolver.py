import re
from collections.abc import Mapping
from dataclasses import dataclass

from dronelog.logging.logger import Log
from dronelog.tasks.base import BaseTaskRepository
from dronelog.tasks.exceptions import ResolutionError, TaskStoreError

TASK_ID_PATTERN = re.compile(r"task-([a-zA-Z0-9]+)")


@dataclass(frozen=True)
class Resolution:
    """Outcome of task resolution.

    ``task_id`` is None when the task could not be determined; ``error`` is
    set when that was caused by a task store failure. Callers treat both the
    same way.
    """

    task_id: str | None
    source: str = ""
    error: ResolutionError | None = None

    @property
    def found(self) -> bool:
        return self.task_id is not None


class TaskResolver:
    """Determines which task an uploaded log file belongs to.

    Order, first match wins:
      1. ``metadata["taskId"]`` when non-empty, returned as-is.
      2. The first ``task-<alphanumeric>`` token in the object path.
      3. The most recently completed task in the store.

    Step 3 is a best-effort guess for uploaders that cannot tag their files.
    It picks the wrong task whenever more than one task completes around the
    same time, so every use of it is logged as a warning.
    """

    def __init__(self, task_repo: BaseTaskRepository) -> None:
        self._task_repo = task_repo

    def resolve(self, file_path: str, metadata: Mapping[str, str] | None = None) -> Resolution:
        explicit = (metadata or {}).get("taskId")
        if explicit:
            Log.info(f"Found task ID in metadata: {explicit}")
            return Resolution(task_id=str(explicit), source="metadata")

        match = TASK_ID_PATTERN.search(file_path)
        if match:
            Log.info(f"Extracted task ID from path: {match.group(1)}")
            return Resolution(task_id=match.group(1), source="path")

        return self._resolve_most_recent_completed(file_path)

    def _resolve_most_recent_completed(self, file_path: str) -> Resolution:
        try:
            task = self._task_repo.find_most_recent_completed()
        except TaskStoreError as exc:
            error = ResolutionError(f"Task lookup failed for {file_path}: {exc}")
            Log.error(str(error))
            return Resolution(task_id=None, error=error)

        if task is None:
            Log.warning(f"No task ID for {file_path} and no completed tasks exist")
            return Resolution(task_id=None)

        Log.warning(
            f"No task ID in metadata or path of {file_path}; "
            f"guessing most recently completed task {task.id}",
            heuristic="most_recent_completed",
        )
        return Resolution(task_id=task.id, source="most_recent_completed")
