from dronelog.config.settings import Settings
from dronelog.database.repositories.provenance_repository import ProvenanceRepository
from dronelog.database.repositories.task_repository import TaskRepository
from dronelog.digest.engine import DigestEngine
from dronelog.ledger.factory import LedgerClientFactory
from dronelog.logging.logger import Log
from dronelog.processor.models import ObjectFinalizedEvent
from dronelog.processor.pipeline import PipelineStep, UploadContext
from dronelog.processor.recorder import MetadataRecorder
from dronelog.processor.steps import (
    ComputeDigestStep,
    RecordProvenanceStep,
    TagSourceStep,
    VerifyTaskStep,
)
from dronelog.storage.base import BaseObjectStorage
from dronelog.storage.factory import ObjectStorageFactory
from dronelog.tasks.resolver import TaskResolver
from dronelog.verification.orchestrator import VerificationOrchestrator
from dronelog.verification.policy import VerificationPolicyFactory


class UploadHandler:
    """Handles one "object finalized" event.

    Pipeline: filter -> local copy -> digest -> record -> tag -> verify.
    The local copy is removed however the pipeline exits. Infrastructure
    failures (SourceUnavailableError, PersistenceError, TaskStoreError)
    propagate so the event can be redelivered; verification rejections are
    returned in ``context.outcome``.
    """

    def __init__(
        self,
        storage: BaseObjectStorage,
        steps: list[PipelineStep],
        watched_prefix: str,
        watched_bucket: str = "",
    ) -> None:
        self._storage = storage
        self._steps = steps
        self._watched_prefix = watched_prefix
        self._watched_bucket = watched_bucket

    def accepts(self, event: ObjectFinalizedEvent) -> bool:
        if self._watched_bucket and event.bucket != self._watched_bucket:
            return False
        return event.name.startswith(self._watched_prefix)

    def handle(self, event: ObjectFinalizedEvent) -> UploadContext | None:
        """Run the pipeline; returns None when the event is not for us."""
        if not self.accepts(event):
            Log.info(
                f"File {event.name} is not in {self._watched_prefix} directory. Skipping.",
                bucket=event.bucket,
            )
            return None

        Log.info(f"Processing uploaded file: {event.name}", bucket=event.bucket)
        context = UploadContext(event=event)
        with self._storage.local_copy(event.bucket, event.name) as local_path:
            context.local_path = local_path
            for step in self._steps:
                context = step.run(context)
        context.local_path = None
        return context


def build_upload_handler(settings: Settings) -> UploadHandler:
    """Build an UploadHandler with all required adapters."""
    storage = ObjectStorageFactory.create(settings)
    task_repo = TaskRepository()
    recorder = MetadataRecorder(ProvenanceRepository(settings.provenance_table), storage)
    orchestrator = VerificationOrchestrator(
        resolver=TaskResolver(task_repo),
        task_repo=task_repo,
        ledger=LedgerClientFactory.create(settings),
        policy=VerificationPolicyFactory.create(settings.verification_policy),
    )
    steps: list[PipelineStep] = [
        ComputeDigestStep(DigestEngine()),
        RecordProvenanceStep(recorder),
        TagSourceStep(recorder),
        VerifyTaskStep(orchestrator),
    ]
    return UploadHandler(
        storage=storage,
        steps=steps,
        watched_prefix=settings.watched_prefix,
        watched_bucket=settings.watched_bucket,
    )
