from dronelog.database.repositories.provenance_repository import ProvenanceRepository
from dronelog.logging.logger import Log
from dronelog.processor.models import FileProvenanceRecord
from dronelog.storage.base import BaseObjectStorage

HASH_METADATA_KEY = "sha256Hash"


class MetadataRecorder:
    """Persists provenance records and tags source objects with their hash."""

    def __init__(self, provenance_repo: ProvenanceRepository, storage: BaseObjectStorage) -> None:
        self._provenance_repo = provenance_repo
        self._storage = storage

    def record(self, provenance: FileProvenanceRecord) -> int:
        """Raises PersistenceError if the record cannot be stored."""
        record_id = self._provenance_repo.insert(provenance)
        Log.info(f"Stored provenance record {record_id} for {provenance.file_path}")
        return record_id

    def tag_source(self, bucket: str, path: str, sha256_hash: str) -> bool:
        """Best-effort: annotate the stored object with its hash.

        Failures are logged and reported as False; the provenance record is
        already durable at this point.
        """
        try:
            self._storage.set_object_metadata(bucket, path, {HASH_METADATA_KEY: sha256_hash})
        except Exception as exc:
            Log.warning(f"Could not tag {bucket}/{path} with its hash: {exc}")
            return False
        Log.info(f"Tagged {bucket}/{path} with {HASH_METADATA_KEY}")
        return True
