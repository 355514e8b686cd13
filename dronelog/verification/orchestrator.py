from collections.abc import Mapping

from dronelog.ledger.base import BaseLedgerClient
from dronelog.ledger.exceptions import SettlementError
from dronelog.logging.logger import Log
from dronelog.processor.models import FileProvenanceRecord
from dronelog.tasks.base import BaseTaskRepository
from dronelog.tasks.exceptions import TaskStateError
from dronelog.tasks.models import STATUS_COMPLETED, Task, TaskVerification
from dronelog.tasks.resolver import TaskResolver
from dronelog.verification.models import (
    REASON_ALREADY_VERIFIED,
    REASON_NOT_COMPLETED,
    REASON_NOT_FOUND,
    REASON_SETTLEMENT_FAILED,
    REASON_UNRESOLVED,
    Fail,
    VerificationOutcome,
    VerificationState,
)
from dronelog.verification.policy import BaseVerificationPolicy


def check_eligible(task: Task | None) -> Task:
    """Raise TaskStateError unless the task can be verified now."""
    if task is None:
        raise TaskStateError(REASON_NOT_FOUND)
    if task.is_verified:
        raise TaskStateError(REASON_ALREADY_VERIFIED)
    if task.status != STATUS_COMPLETED:
        raise TaskStateError(REASON_NOT_COMPLETED)
    return task


class VerificationOrchestrator:
    """Drives one task from an uploaded log file to a recorded verification.

    States: unresolved -> resolved -> eligible -> settling -> recorded, or
    rejected at any gate before settling. The eligibility check, ledger call
    and write all happen while the task is locked, and the write only lands
    if the task still has no verification result, so a task is settled at
    most once however often the same upload is delivered.
    """

    def __init__(
        self,
        resolver: TaskResolver,
        task_repo: BaseTaskRepository,
        ledger: BaseLedgerClient,
        policy: BaseVerificationPolicy,
    ) -> None:
        self._resolver = resolver
        self._task_repo = task_repo
        self._ledger = ledger
        self._policy = policy

    def run(
        self,
        provenance: FileProvenanceRecord,
        metadata: Mapping[str, str] | None = None,
    ) -> VerificationOutcome:
        """Resolve the task for an upload and verify it."""
        resolution = self._resolver.resolve(provenance.file_path, metadata)
        if not resolution.found:
            Log.warning(f"Could not determine task ID for file {provenance.file_path}")
            return VerificationOutcome.rejected(REASON_UNRESOLVED)
        return self.verify(resolution.task_id, provenance)

    def verify(self, task_id: str, provenance: FileProvenanceRecord) -> VerificationOutcome:
        """Verify a resolved task against a provenance record.

        Raises:
            TaskStoreError: if the task store itself fails; the caller retries.
        """
        with self._task_repo.lock(task_id) as locked:
            try:
                task = check_eligible(locked.task)
            except TaskStateError as exc:
                Log.warning(f"Task {task_id} rejected: {exc}", status=_status_of(locked.task))
                return VerificationOutcome.rejected(
                    str(exc), task_id=task_id, stage=VerificationState.RESOLVED
                )

            decision = self._policy.decide(task, provenance)
            if isinstance(decision, Fail):
                Log.warning(f"Task {task_id} failed verification: {decision.reason}")

            Log.info(
                f"Settling task {task_id}",
                result=decision.passed,
                report_hash=provenance.sha256_hash,
            )
            try:
                tx_id = self._ledger.settle(task_id, decision.passed, provenance.sha256_hash)
            except SettlementError as exc:
                Log.error(f"Settlement failed for task {task_id}: {exc}")
                return VerificationOutcome.rejected(
                    f"{REASON_SETTLEMENT_FAILED}: {exc}",
                    task_id=task_id,
                    stage=VerificationState.ELIGIBLE,
                )

            verification = TaskVerification(
                result=decision.passed,
                report_hash=provenance.sha256_hash,
                transaction_id=tx_id,
            )
            if not locked.record_verification(verification):
                Log.warning(
                    f"Task {task_id} was verified concurrently; discarding settlement {tx_id}"
                )
                return VerificationOutcome.rejected(
                    REASON_ALREADY_VERIFIED, task_id=task_id, stage=VerificationState.SETTLING
                )

        Log.info(f"Task {task_id} recorded as {verification.status} with tx {tx_id}")
        return VerificationOutcome.recorded(task_id, tx_id, decision.passed)


def _status_of(task: Task | None) -> str:
    return task.status if task is not None else "missing"
