from dataclasses import dataclass
from datetime import datetime

STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"
STATUS_VERIFIED = "verified"
STATUS_REJECTED = "rejected"


@dataclass(frozen=True)
class Task:
    """Read model of a row in the tasks table.

    Only the verification fields are ever written by this worker; the rest of
    the lifecycle is owned by the task tracker.
    """

    id: str
    status: str
    completed_at: datetime | None = None
    verification_result: bool | None = None
    verification_report_hash: str | None = None
    verification_timestamp: datetime | None = None
    verification_tx: str | None = None

    @property
    def is_verified(self) -> bool:
        return self.verification_result is not None


@dataclass(frozen=True)
class TaskVerification:
    """Fields written exactly once, together, when a task is settled."""

    result: bool
    report_hash: str
    transaction_id: str

    @property
    def status(self) -> str:
        return STATUS_VERIFIED if self.result else STATUS_REJECTED
