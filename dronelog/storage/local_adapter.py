import json
import shutil
import uuid
from pathlib import Path, PurePosixPath

from dronelog.logging.logger import Log
from dronelog.processor.exceptions import SourceUnavailableError
from dronelog.storage.base import BaseObjectStorage


def object_file_path(storage_root: Path, bucket: str, path: str) -> Path:
    """Build path to an object: {storage_root}/{bucket}/{path}"""
    relative = PurePosixPath(path)
    if relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"Object path '{path}' escapes the bucket")
    return storage_root / bucket / Path(*relative.parts)


class LocalObjectStorage(BaseObjectStorage):
    """Object store backed by a directory tree, one sub-directory per bucket.

    Custom object metadata is kept in a ``<object>.metadata.json`` sidecar.
    """

    METADATA_SUFFIX = ".metadata.json"

    def __init__(self, storage_root: Path, tmp_dir: Path) -> None:
        self._storage_root = storage_root
        self._tmp_dir = tmp_dir

    def download(self, bucket: str, path: str) -> Path:
        source = object_file_path(self._storage_root, bucket, path)
        self._tmp_dir.mkdir(parents=True, exist_ok=True)
        destination = self._tmp_dir / f"{uuid.uuid4().hex}-{source.name}"
        try:
            shutil.copyfile(source, destination)
        except OSError as exc:
            destination.unlink(missing_ok=True)
            raise SourceUnavailableError(f"Cannot download {bucket}/{path}: {exc}") from exc
        Log.debug(f"Downloaded {bucket}/{path} to {destination}")
        return destination

    def delete(self, local_path: Path) -> None:
        local_path.unlink(missing_ok=True)
        Log.debug(f"Removed local copy {local_path}")

    def set_object_metadata(self, bucket: str, path: str, metadata: dict[str, str]) -> None:
        target = object_file_path(self._storage_root, bucket, path)
        if not target.exists():
            raise FileNotFoundError(f"Object not found: {bucket}/{path}")
        sidecar = target.with_name(target.name + self.METADATA_SUFFIX)
        current = self.get_object_metadata(bucket, path)
        current.update(metadata)
        sidecar.write_text(json.dumps(current, sort_keys=True), encoding="utf-8")

    def get_object_metadata(self, bucket: str, path: str) -> dict[str, str]:
        target = object_file_path(self._storage_root, bucket, path)
        sidecar = target.with_name(target.name + self.METADATA_SUFFIX)
        if not sidecar.exists():
            return {}
        data = json.loads(sidecar.read_text(encoding="utf-8"))
        return {str(key): str(value) for key, value in data.items()}
