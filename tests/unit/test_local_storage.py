from pathlib import Path

import pytest

from dronelog.processor.exceptions import SourceUnavailableError
from dronelog.storage.local_adapter import LocalObjectStorage, object_file_path


def _make_storage(bucket_root: Path, tmp_path: Path) -> LocalObjectStorage:
    return LocalObjectStorage(storage_root=bucket_root, tmp_dir=tmp_path / "tmp")


class TestObjectFilePath:
    def test_joins_bucket_and_path(self) -> None:
        result = object_file_path(Path("/data"), "drone-logs", "logs/a.log")

        assert result == Path("/data/drone-logs/logs/a.log")

    def test_rejects_parent_traversal(self) -> None:
        with pytest.raises(ValueError, match="escapes"):
            object_file_path(Path("/data"), "drone-logs", "logs/../../etc/passwd")


class TestDownload:
    def test_copies_object_to_tmp_dir(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        local = storage.download("drone-logs", "logs/flight-001.log")

        assert local.parent == tmp_path / "tmp"
        assert local.read_bytes() == b"hello drone"

    def test_each_download_gets_its_own_copy(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        first = storage.download("drone-logs", "logs/flight-001.log")
        second = storage.download("drone-logs", "logs/flight-001.log")

        assert first != second

    def test_raises_source_unavailable_when_missing(
        self, bucket_root: Path, tmp_path: Path
    ) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        with pytest.raises(SourceUnavailableError, match="logs/missing.log"):
            storage.download("drone-logs", "logs/missing.log")

        assert list((tmp_path / "tmp").iterdir()) == []


class TestLocalCopy:
    def test_removes_copy_after_block(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        with storage.local_copy("drone-logs", "logs/flight-001.log") as local:
            assert local.exists()

        assert not local.exists()

    def test_removes_copy_when_block_raises(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        with pytest.raises(RuntimeError):
            with storage.local_copy("drone-logs", "logs/flight-001.log") as local:
                raise RuntimeError("hashing blew up")

        assert not local.exists()


class TestObjectMetadata:
    def test_writes_sidecar_metadata(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        storage.set_object_metadata("drone-logs", "logs/flight-001.log", {"sha256Hash": "abc"})

        assert storage.get_object_metadata("drone-logs", "logs/flight-001.log") == {
            "sha256Hash": "abc"
        }

    def test_merges_with_existing_metadata(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)
        storage.set_object_metadata("drone-logs", "logs/flight-001.log", {"taskId": "T1"})

        storage.set_object_metadata("drone-logs", "logs/flight-001.log", {"sha256Hash": "abc"})

        assert storage.get_object_metadata("drone-logs", "logs/flight-001.log") == {
            "taskId": "T1",
            "sha256Hash": "abc",
        }

    def test_raises_for_missing_object(self, bucket_root: Path, tmp_path: Path) -> None:
        storage = _make_storage(bucket_root, tmp_path)

        with pytest.raises(FileNotFoundError):
            storage.set_object_metadata("drone-logs", "logs/missing.log", {"sha256Hash": "x"})
