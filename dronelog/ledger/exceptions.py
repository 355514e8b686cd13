class LedgerError(Exception):
    """Base exception for ledger client errors."""


class SettlementError(LedgerError):
    """Raised when a settlement is not submitted or not confirmed."""


class MissingCredentialError(LedgerError):
    """Raised when the validator key is absent or malformed."""
