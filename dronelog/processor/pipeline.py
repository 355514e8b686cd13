from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from dronelog.processor.models import FileProvenanceRecord, ObjectFinalizedEvent
from dronelog.verification.models import VerificationOutcome


@dataclass(slots=True)
class UploadContext:
    event: ObjectFinalizedEvent
    local_path: Path | None = None
    sha256_hash: str = ""
    provenance: FileProvenanceRecord | None = None
    record_id: int | None = None
    tagged: bool = False
    outcome: VerificationOutcome | None = None


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError
