from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from dronelog.tasks.models import Task, TaskVerification


class LockedTask(ABC):
    """A task held exclusively for the duration of one verification attempt."""

    @property
    @abstractmethod
    def task(self) -> Task | None:
        """The task as read under the lock, or None if it does not exist."""

    @abstractmethod
    def record_verification(self, verification: TaskVerification) -> bool:
        """Write the verification fields if none are set yet.

        Returns:
            True if this call wrote them, False on conflict (already verified
            or no longer completed). Existing values are never overwritten.
        """


class BaseTaskRepository(ABC):
    """Contract for the external task store."""

    @abstractmethod
    def find_by_id(self, task_id: str) -> Task | None:
        """Raises TaskStoreError on query failure."""

    @abstractmethod
    def find_most_recent_completed(self) -> Task | None:
        """Latest task with status 'completed' by completed_at.

        Raises TaskStoreError on query failure.
        """

    @abstractmethod
    def lock(self, task_id: str) -> AbstractContextManager[LockedTask]:
        """Hold a task for verification.

        Changes made through the yielded LockedTask are committed when the
        block exits normally and discarded if it raises.
        """
