from abc import ABC, abstractmethod


class BaseLedgerClient(ABC):
    """Contract for settling a task's verification outcome on the ledger."""

    @abstractmethod
    def settle(self, task_id: str, result: bool, report_hash: str) -> str:
        """Durably record a verification outcome.

        Args:
            task_id: Task being verified.
            result: Whether verification passed.
            report_hash: SHA-256 hex of the log file backing the verdict.

        Returns:
            The ledger's transaction reference.

        Raises:
            SettlementError: if the outcome was not confirmed by the ledger.
        """
