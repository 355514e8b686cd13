import time
from collections.abc import Callable
from datetime import datetime, timezone

from dronelog.config.settings import Settings
from dronelog.database.connection import get_connection
from dronelog.database.models import StorageEventRecord
from dronelog.database.repositories.event_repository import StorageEventRepository
from dronelog.logging.logger import Log
from dronelog.processor.handler import UploadHandler
from dronelog.processor.models import ObjectFinalizedEvent


def to_finalized_event(record: StorageEventRecord) -> ObjectFinalizedEvent:
    return ObjectFinalizedEvent(
        bucket=record.bucket,
        name=record.object_name,
        content_type=record.content_type,
        size_bytes=record.size_bytes,
        time_created=record.time_created or datetime.now(timezone.utc),
        metadata=record.metadata,
    )


class EventRunner:
    """Claim storage events from the inbox and run them with retry logic.

    Verification rejections count as handled. Anything that escapes the
    upload handler is an infrastructure fault and the event is retried.
    """

    def __init__(
        self,
        handler: UploadHandler,
        event_repo: StorageEventRepository,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._handler = handler
        self._event_repo = event_repo
        self._settings = settings
        self._sleep = sleep

    def poll(self, max_events: int | None = None) -> int:
        """Claim and run events until interrupted or ``max_events`` have run.

        Returns the number of events run.
        """
        Log.info("Polling for storage events")
        handled = 0
        try:
            while max_events is None or handled < max_events:
                record = self._claim()
                if record is None:
                    self._sleep(self._settings.event_poll_interval_seconds)
                    continue
                self.run(record)
                handled += 1
        except KeyboardInterrupt:
            Log.info("Interrupted, stopping event polling")
        return handled

    def _claim(self) -> StorageEventRecord | None:
        # A failed claim is retried on the next poll.
        try:
            with get_connection() as conn:
                return self._event_repo.claim_next_event(conn)
        except Exception as exc:
            Log.warning(f"Could not claim storage event: {exc}")
            return None

    def run(self, record: StorageEventRecord) -> None:
        """Execute a single event with error handling."""
        Log.info(f"Running event {record.id} (attempt {record.attempts + 1})")
        try:
            self._handler.handle(to_finalized_event(record))
            self._event_repo.mark_done(record.id)
            Log.info(f"Event {record.id} completed")
        except Exception as exc:
            self._handle_failure(record, exc)

    def _handle_failure(self, record: StorageEventRecord, exc: Exception) -> None:
        """Increment attempts; mark failed if at max, otherwise back to pending."""
        Log.exception(f"Event {record.id} failed: {exc}", object_name=record.object_name)
        if record.attempts + 1 >= self._settings.max_event_attempts:
            self._event_repo.mark_failed(record.id, str(exc))
            Log.error(f"Event {record.id} permanently failed after {record.attempts + 1} attempts")
        else:
            self._event_repo.increment_attempts(record.id, str(exc))
            Log.warning(f"Event {record.id} will be retried (attempt {record.attempts + 1})")
