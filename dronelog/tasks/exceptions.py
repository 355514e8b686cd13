class TaskError(Exception):
    """Base exception for task lookup and state errors."""


class TaskStoreError(TaskError):
    """Raised when the task store cannot be queried or written."""


class ResolutionError(TaskError):
    """Raised when the task an upload belongs to cannot be determined."""


class TaskStateError(TaskError):
    """Raised when a task is absent or not eligible for verification."""
