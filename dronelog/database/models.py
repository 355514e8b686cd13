from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class StorageEventRecord:
    """Represents a row from the storage_events table."""

    id: int
    bucket: str
    object_name: str
    status: str
    attempts: int
    content_type: str | None = None
    size_bytes: int = 0
    time_created: datetime | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
