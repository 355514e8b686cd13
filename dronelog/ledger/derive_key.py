"""Derive a validator key from a wallet recovery phrase.

Run with ``python -m dronelog.ledger.derive_key``. The phrase is read without
echo; the printed secret is the value for ``VALIDATOR_PRIVATE_KEY``.
"""

import argparse
import getpass
import sys
import unicodedata

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from mnemonic import Mnemonic

_ENGLISH = Mnemonic("english")


def normalize_mnemonic(mnemonic: str) -> str:
    """Collapse whitespace and validate against the BIP-39 English wordlist.

    Raises:
        ValueError: if a word is not in the wordlist or the checksum is wrong.
    """
    phrase = " ".join(unicodedata.normalize("NFKD", mnemonic).split())
    if not _ENGLISH.check(phrase):
        raise ValueError("Invalid mnemonic phrase")
    return phrase


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """64-byte BIP-39 seed of a validated phrase."""
    return Mnemonic.to_seed(normalize_mnemonic(mnemonic), passphrase)


def derive_validator_key(mnemonic: str, passphrase: str = "") -> tuple[str, str]:
    """Return (public key hex, 32-byte secret seed hex).

    The Ed25519 seed is the first 32 bytes of the BIP-39 seed.
    """
    seed = mnemonic_to_seed(mnemonic, passphrase)[:32]
    private_key = Ed25519PrivateKey.from_private_bytes(seed)
    public_key = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return public_key.hex(), seed.hex()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--passphrase",
        action="store_true",
        help="prompt for an optional BIP-39 passphrase",
    )
    args = parser.parse_args(argv)

    mnemonic = getpass.getpass("Enter your mnemonic/recovery phrase: ")
    passphrase = getpass.getpass("Passphrase: ") if args.passphrase else ""
    try:
        public_key, secret = derive_validator_key(mnemonic, passphrase)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Public key: {public_key}")
    print(f"Private key (hex seed): {secret}")
    print("Store it securely and set it as VALIDATOR_PRIVATE_KEY.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
