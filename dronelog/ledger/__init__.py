from dronelog.ledger.base import BaseLedgerClient
from dronelog.ledger.factory import LedgerClientFactory
from dronelog.ledger.mock_client import MockLedgerClient
from dronelog.ledger.signed_client import SignedLedgerClient

__all__ = ["BaseLedgerClient", "LedgerClientFactory", "MockLedgerClient", "SignedLedgerClient"]
