import time
import uuid

from dronelog.ledger.base import BaseLedgerClient
from dronelog.logging.logger import Log


class MockLedgerClient(BaseLedgerClient):
    """Development ledger: no I/O, always succeeds, returns a unique id."""

    PREFIX = "MOCK_TX"

    def settle(self, task_id: str, result: bool, report_hash: str) -> str:
        millis = int(time.time() * 1000)
        tx_id = f"{self.PREFIX}_{millis:x}_{uuid.uuid4().hex[:8]}"
        Log.info(
            f"Created mock transaction {tx_id}",
            task_id=task_id,
            result=result,
            report_hash=report_hash,
        )
        return tx_id
