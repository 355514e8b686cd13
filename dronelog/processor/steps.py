from collections.abc import Callable
from datetime import datetime, timezone

from dronelog.digest.engine import DigestEngine
from dronelog.logging.logger import Log
from dronelog.processor.models import FileProvenanceRecord
from dronelog.processor.pipeline import PipelineStep, UploadContext
from dronelog.processor.recorder import MetadataRecorder
from dronelog.verification.orchestrator import VerificationOrchestrator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class ComputeDigestStep(PipelineStep):
    def __init__(self, digest_engine: DigestEngine) -> None:
        self._digest_engine = digest_engine

    def run(self, context: UploadContext) -> UploadContext:
        if context.local_path is None:
            raise ValueError("UploadContext.local_path must be set before hashing")
        context.sha256_hash = self._digest_engine.digest_file(
            context.local_path, expected_size=context.event.size_bytes or None
        )
        Log.info(f"File hash: {context.sha256_hash}", file=context.event.name)
        return context


class RecordProvenanceStep(PipelineStep):
    def __init__(
        self,
        recorder: MetadataRecorder,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._recorder = recorder
        self._clock = clock

    def run(self, context: UploadContext) -> UploadContext:
        if not context.sha256_hash:
            raise ValueError("UploadContext.sha256_hash must be set before recording")
        event = context.event
        uploaded = _as_utc(event.time_created)
        context.provenance = FileProvenanceRecord(
            file_name=event.file_name,
            file_path=event.name,
            content_type=event.content_type,
            size_bytes=event.size_bytes,
            upload_timestamp=uploaded,
            processed_timestamp=max(self._clock(), uploaded),
            sha256_hash=context.sha256_hash,
        )
        context.record_id = self._recorder.record(context.provenance)
        return context


class TagSourceStep(PipelineStep):
    def __init__(self, recorder: MetadataRecorder) -> None:
        self._recorder = recorder

    def run(self, context: UploadContext) -> UploadContext:
        context.tagged = self._recorder.tag_source(
            context.event.bucket, context.event.name, context.sha256_hash
        )
        return context


class VerifyTaskStep(PipelineStep):
    def __init__(self, orchestrator: VerificationOrchestrator) -> None:
        self._orchestrator = orchestrator

    def run(self, context: UploadContext) -> UploadContext:
        if context.provenance is None:
            raise ValueError("UploadContext.provenance must be set before verification")
        context.outcome = self._orchestrator.run(context.provenance, context.event.metadata)
        if context.outcome.success:
            Log.info(
                f"Verification successful: {context.outcome.message}",
                transaction_id=context.outcome.transaction_id,
            )
        else:
            Log.warning(f"Verification issue: {context.outcome.message}", file=context.event.name)
        return context
