import psycopg
from psycopg import sql

from dronelog.database.connection import get_connection
from dronelog.processor.exceptions import PersistenceError
from dronelog.processor.models import FileProvenanceRecord


class ProvenanceRepository:
    """Append-only inserts into the provenance table (``file_hashes``)."""

    def __init__(self, table: str = "file_hashes") -> None:
        self._table = table

    def insert(self, record: FileProvenanceRecord) -> int:
        """Insert a provenance record and return its id.

        Raises:
            PersistenceError: if the insert fails.
        """
        query = sql.SQL(
            """
            INSERT INTO {table}
            (file_name, file_path, content_type, size_bytes,
             upload_timestamp, processed_timestamp, sha256_hash)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id
            """
        ).format(table=sql.Identifier(self._table))
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        query,
                        (
                            record.file_name,
                            record.file_path,
                            record.content_type,
                            record.size_bytes,
                            record.upload_timestamp,
                            record.processed_timestamp,
                            record.sha256_hash,
                        ),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(
                f"Failed to store provenance for {record.file_path}: {exc}"
            ) from exc

        if row is None:
            raise PersistenceError(f"Insert returned no id for {record.file_path}")
        return int(row[0])
