from dronelog.config.settings import Settings
from dronelog.ledger.base import BaseLedgerClient
from dronelog.ledger.credential import ValidatorCredential
from dronelog.ledger.mock_client import MockLedgerClient
from dronelog.ledger.signed_client import SignedLedgerClient


class LedgerClientFactory:
    """Creates the ledger client selected by ``ledger_mode``."""

    MODES = ("mock", "signed")

    @classmethod
    def create(cls, settings: Settings) -> BaseLedgerClient:
        """Raises MissingCredentialError for ``signed`` without a usable key.

        Raises ValueError for ``signed`` without ``ledger_rpc_url``.
        """
        mode = settings.ledger_mode.lower()
        if mode == "mock":
            return MockLedgerClient()
        if mode == "signed":
            if not settings.ledger_rpc_url.strip():
                raise ValueError("ledger_rpc_url is required for ledger_mode=signed")
            credential = ValidatorCredential.from_secret(settings.validator_private_key)
            return SignedLedgerClient(
                credential=credential,
                rpc_url=settings.ledger_rpc_url,
                timeout_seconds=settings.ledger_timeout_seconds,
                confirm_timeout_seconds=settings.ledger_confirm_timeout_seconds,
                confirm_poll_seconds=settings.ledger_confirm_poll_seconds,
            )
        raise ValueError(f"Unknown ledger mode '{mode}'. Choose from: {list(cls.MODES)}")
