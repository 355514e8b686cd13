import hashlib
from pathlib import Path
from typing import BinaryIO

from dronelog.processor.exceptions import SourceUnavailableError


class DigestEngine:
    """Computes the SHA-256 content digest of an uploaded file."""

    CHUNK_SIZE = 1024 * 1024

    def __init__(self, chunk_size: int | None = None) -> None:
        self._chunk_size = chunk_size if chunk_size is not None else self.CHUNK_SIZE

    def digest_file(self, path: Path, expected_size: int | None = None) -> str:
        """Hash the file at ``path``.

        Raises:
            SourceUnavailableError: if the file cannot be opened or read, or if
                fewer/more bytes than ``expected_size`` were read.
        """
        try:
            with path.open("rb") as stream:
                return self.digest_stream(stream, expected_size)
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc

    def digest_stream(self, stream: BinaryIO, expected_size: int | None = None) -> str:
        """Hash a byte stream to the end and return lowercase hex.

        The digest is only returned once the whole stream has been consumed.
        """
        hasher = hashlib.sha256()
        total = 0
        try:
            while chunk := stream.read(self._chunk_size):
                hasher.update(chunk)
                total += len(chunk)
        except OSError as exc:
            raise SourceUnavailableError(f"Read failed after {total} bytes: {exc}") from exc

        if expected_size is not None and total != expected_size:
            raise SourceUnavailableError(
                f"Read {total} bytes but the object is {expected_size} bytes"
            )
        return hasher.hexdigest()
