import json
import time
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import httpx

from dronelog.ledger.base import BaseLedgerClient
from dronelog.ledger.credential import ValidatorCredential
from dronelog.ledger.exceptions import SettlementError
from dronelog.logging.logger import Log

CONFIRMED_STATUSES = frozenset({"confirmed", "finalized"})
FAILED_STATUSES = frozenset({"failed", "dropped"})


def canonical_instruction(instruction: dict[str, Any]) -> bytes:
    return json.dumps(
        instruction, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


class SignedLedgerClient(BaseLedgerClient):
    """Settles verifications as validator-signed instructions over JSON-RPC.

    Flow: build instruction -> sign (Ed25519) -> ``submitSettlement`` ->
    poll ``getSettlementStatus`` until confirmed. A transaction id is only
    returned once the ledger reports the settlement as confirmed.
    """

    def __init__(
        self,
        *,
        credential: ValidatorCredential,
        rpc_url: str,
        timeout_seconds: float,
        confirm_timeout_seconds: float,
        confirm_poll_seconds: float,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._credential = credential
        self._rpc_url = rpc_url
        self._confirm_timeout_seconds = confirm_timeout_seconds
        self._confirm_poll_seconds = confirm_poll_seconds
        self._client = http_client or httpx.Client(timeout=timeout_seconds)
        self._sleep = sleep

    def settle(self, task_id: str, result: bool, report_hash: str) -> str:
        instruction = self._build_instruction(task_id, result, report_hash)
        signature = self._credential.sign(canonical_instruction(instruction))
        submitted = self._call(
            "submitSettlement",
            [{"instruction": instruction, "signature": signature.hex()}],
        )
        tx_id = submitted.get("transactionId") if isinstance(submitted, dict) else submitted
        if not isinstance(tx_id, str) or not tx_id:
            raise SettlementError(f"Ledger returned no transaction id for task {task_id}")
        Log.info(f"Submitted settlement {tx_id}", task_id=task_id)

        self._wait_for_confirmation(tx_id)
        Log.info(f"Settlement {tx_id} confirmed", task_id=task_id)
        return tx_id

    def _build_instruction(self, task_id: str, result: bool, report_hash: str) -> dict[str, Any]:
        return {
            "type": "verify_task",
            "task_id": task_id,
            "result": result,
            "report_hash": report_hash,
            "validator": self._credential.public_key_hex,
            "nonce": uuid.uuid4().hex,
            "issued_at": datetime.now(timezone.utc).isoformat(),
        }

    def _wait_for_confirmation(self, tx_id: str) -> None:
        deadline = time.monotonic() + self._confirm_timeout_seconds
        while True:
            status = self._call("getSettlementStatus", [tx_id])
            state = status.get("status") if isinstance(status, dict) else None
            if state in CONFIRMED_STATUSES:
                return
            if state in FAILED_STATUSES:
                reason = status.get("error") or state
                raise SettlementError(f"Settlement {tx_id} {state}: {reason}")
            if time.monotonic() >= deadline:
                raise SettlementError(
                    f"Settlement {tx_id} not confirmed within {self._confirm_timeout_seconds}s"
                )
            self._sleep(self._confirm_poll_seconds)

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": uuid.uuid4().hex, "method": method, "params": params}
        try:
            response = self._client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise SettlementError(f"Ledger {method} request failed: {exc}") from exc
        except ValueError as exc:
            raise SettlementError(f"Ledger {method} returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise SettlementError(f"Ledger {method} returned a non-object response")
        if body.get("error"):
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise SettlementError(f"Ledger {method} error: {message}")
        return body.get("result")
