import posixpath
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ObjectFinalizedEvent:
    """An "object finalized" notification from the storage layer."""

    bucket: str
    name: str
    content_type: str | None
    size_bytes: int
    time_created: datetime
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def file_name(self) -> str:
        return posixpath.basename(self.name)


@dataclass(frozen=True)
class FileProvenanceRecord:
    """Immutable audit entry binding a file's hash to its upload context."""

    file_name: str
    file_path: str
    content_type: str | None
    size_bytes: int
    upload_timestamp: datetime
    processed_timestamp: datetime
    sha256_hash: str
