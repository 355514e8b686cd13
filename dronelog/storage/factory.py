from dronelog.config.settings import Settings
from dronelog.processor.exceptions import UnsupportedStorageBackendError
from dronelog.storage.base import BaseObjectStorage
from dronelog.storage.local_adapter import LocalObjectStorage


class ObjectStorageFactory:
    """Creates the object storage adapter based on settings."""

    BACKENDS = ("local",)

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalObjectStorage(settings.storage_root, settings.tmp_dir)
        raise UnsupportedStorageBackendError(
            f"storage_backend '{backend}' is not supported. Choose from: {list(cls.BACKENDS)}"
        )
