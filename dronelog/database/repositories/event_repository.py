from typing import Any

import psycopg
from psycopg.rows import dict_row

from dronelog.database.connection import get_connection
from dronelog.database.models import StorageEventRecord

_EVENT_COLUMNS = """
    id, bucket, object_name, content_type, size_bytes, time_created,
    metadata, status, attempts
"""


def _row_to_event(row: dict[str, Any]) -> StorageEventRecord:
    return StorageEventRecord(
        id=row["id"],
        bucket=row["bucket"],
        object_name=row["object_name"],
        status=row["status"],
        attempts=row["attempts"],
        content_type=row["content_type"],
        size_bytes=row["size_bytes"],
        time_created=row["time_created"],
        metadata=dict(row["metadata"] or {}),
        error_message=row.get("error_message"),
        locked_at=row.get("locked_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class StorageEventRepository:
    """Database operations for the storage_events inbox table.

    The storage layer inserts one row per "object finalized" delivery; a
    redelivered event is simply another row.
    """

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def claim_next_event(self, conn: psycopg.Connection[Any]) -> StorageEventRecord | None:
        """Claim the next pending event using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM storage_events
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE storage_events
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        event = _row_to_event(row)
        event.status = "processing"
        return event

    def mark_done(self, event_id: int) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE storage_events
                SET status = 'done', updated_at = NOW()
                WHERE id = %s
                """,
                (event_id,),
            )
            conn.commit()

    def mark_failed(self, event_id: int, error: str) -> None:
        """Mark an event as permanently failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE storage_events
                SET status = 'failed', error_message = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (error, event_id),
            )
            conn.commit()

    def increment_attempts(self, event_id: int, error: str) -> None:
        """Increment attempt count and return the event to pending."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE storage_events
                SET attempts = attempts + 1, status = 'pending', error_message = %s,
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error, event_id),
            )
            conn.commit()

    def find_by_id(self, event_id: int) -> StorageEventRecord | None:
        """Find an event by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_EVENT_COLUMNS}, error_message, locked_at, created_at, updated_at
                    FROM storage_events
                    WHERE id = %s
                    """,
                    (event_id,),
                )
                row = cur.fetchone()

        return _row_to_event(row) if row is not None else None
