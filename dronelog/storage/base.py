from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path


class BaseObjectStorage(ABC):
    """Contract for the object store that uploads land in."""

    @abstractmethod
    def download(self, bucket: str, path: str) -> Path:
        """Copy an object to a local file owned by the caller.

        Raises:
            SourceUnavailableError: if the object cannot be copied.
        """

    @abstractmethod
    def delete(self, local_path: Path) -> None:
        """Remove a local copy returned by ``download``."""

    @abstractmethod
    def set_object_metadata(self, bucket: str, path: str, metadata: dict[str, str]) -> None:
        """Merge custom metadata keys into the stored object."""

    @contextmanager
    def local_copy(self, bucket: str, path: str) -> Generator[Path, None, None]:
        """Yield a local copy of an object, removing it on every exit path."""
        local_path = self.download(bucket, path)
        try:
            yield local_path
        finally:
            self.delete(local_path)
