import base64
import binascii

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from dronelog.ledger.exceptions import MissingCredentialError


def _decode_secret(secret: str) -> bytes:
    try:
        return bytes.fromhex(secret)
    except ValueError:
        pass
    try:
        padding = "=" * (-len(secret) % 4)
        return base64.b64decode(
            (secret + padding).replace("-", "+").replace("_", "/"), validate=True
        )
    except (binascii.Error, ValueError) as exc:
        raise MissingCredentialError("Validator key is neither hex nor base64") from exc


class ValidatorCredential:
    """Ed25519 signing key of the validator that settles verifications."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._private_key = private_key

    @classmethod
    def from_secret(cls, secret: str) -> "ValidatorCredential":
        """Load a key from a hex or base64 32-byte seed or 64-byte keypair.

        Raises:
            MissingCredentialError: if the secret is empty or malformed.
        """
        secret = secret.strip()
        if not secret:
            raise MissingCredentialError(
                "No validator private key configured (VALIDATOR_PRIVATE_KEY)"
            )
        raw = _decode_secret(secret)
        # 64-byte keypairs carry the seed first and the public key second.
        if len(raw) == 64:
            raw = raw[:32]
        if len(raw) != 32:
            raise MissingCredentialError(
                f"Validator key must be a 32-byte seed or 64-byte keypair, got {len(raw)} bytes"
            )
        return cls(Ed25519PrivateKey.from_private_bytes(raw))

    @property
    def public_key_hex(self) -> str:
        return self._private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw).hex()

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)
