from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import psycopg
import pytest
from psycopg import sql

from dronelog.database.repositories.provenance_repository import ProvenanceRepository
from dronelog.processor.exceptions import PersistenceError
from dronelog.processor.models import FileProvenanceRecord

MODULE = "dronelog.database.repositories.provenance_repository.get_connection"
UPLOADED_AT = datetime(2025, 3, 1, tzinfo=timezone.utc)


def _make_record() -> FileProvenanceRecord:
    return FileProvenanceRecord(
        file_name="flight.log",
        file_path="logs/flight.log",
        content_type="text/plain",
        size_bytes=11,
        upload_timestamp=UPLOADED_AT,
        processed_timestamp=UPLOADED_AT,
        sha256_hash="ab" * 32,
    )


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestInsert:
    @patch(MODULE)
    def test_returns_new_id(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (17,)

        assert ProvenanceRepository().insert(_make_record()) == 17

    @patch(MODULE)
    def test_passes_record_fields(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (1,)

        ProvenanceRepository("file_hashes").insert(_make_record())

        query, params = mock_cursor.execute.call_args.args
        assert isinstance(query, sql.Composed)
        assert params == (
            "flight.log",
            "logs/flight.log",
            "text/plain",
            11,
            UPLOADED_AT,
            UPLOADED_AT,
            "ab" * 32,
        )

    @patch(MODULE)
    def test_commits_transaction(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = (1,)

        ProvenanceRepository().insert(_make_record())

        mock_conn.commit.assert_called_once()

    @patch(MODULE)
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("disk full")

        with pytest.raises(PersistenceError, match="logs/flight.log"):
            ProvenanceRepository().insert(_make_record())
