from dataclasses import dataclass
from enum import Enum

REASON_UNRESOLVED = "task id unresolved"
REASON_NOT_FOUND = "task not found"
REASON_NOT_COMPLETED = "task not completed"
REASON_ALREADY_VERIFIED = "already verified"
REASON_SETTLEMENT_FAILED = "settlement failed"


class VerificationState(Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    ELIGIBLE = "eligible"
    SETTLING = "settling"
    RECORDED = "recorded"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Pass:
    """Verification passed."""

    passed = True


@dataclass(frozen=True)
class Fail:
    """Verification failed for ``reason``."""

    reason: str
    passed = False


VerificationDecision = Pass | Fail


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of one orchestration run; returned to the caller, never stored.

    ``success`` says whether orchestration reached a recorded settlement, not
    whether the task passed verification (see ``verification_result``).
    ``stage`` is the last state reached before the run ended.
    """

    success: bool
    message: str
    transaction_id: str | None = None
    task_id: str | None = None
    state: VerificationState = VerificationState.REJECTED
    verification_result: bool | None = None
    stage: VerificationState = VerificationState.UNRESOLVED

    @classmethod
    def rejected(
        cls,
        reason: str,
        task_id: str | None = None,
        stage: VerificationState = VerificationState.UNRESOLVED,
    ) -> "VerificationOutcome":
        return cls(success=False, message=reason, task_id=task_id, stage=stage)

    @classmethod
    def recorded(
        cls, task_id: str, transaction_id: str, verification_result: bool
    ) -> "VerificationOutcome":
        return cls(
            success=True,
            message=f"Task {task_id} verified successfully",
            transaction_id=transaction_id,
            task_id=task_id,
            state=VerificationState.RECORDED,
            verification_result=verification_result,
            stage=VerificationState.RECORDED,
        )
