import os
import uuid
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import psycopg
import pytest

from dronelog.config.settings import Settings
from dronelog.database.connection import close_pool, get_connection, init_pool

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "db" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "dronelog_test")
    return Settings()


def _create_statements() -> list[str]:
    statements = SCHEMA_PATH.read_text(encoding="utf-8").split(";")
    return [
        s.strip()
        for s in statements
        if s.strip() and "CREATE" in s and "GRANT" not in s and "REVOKE" not in s
    ]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            for statement in _create_statements():
                conn.execute(statement)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to a test database")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, Any]], None, None]:
    cleanup: list[tuple[str, Any]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "tasks":
                    cur.execute("DELETE FROM tasks WHERE id = %s", (row_id,))
                elif table == "file_hashes":
                    cur.execute("DELETE FROM file_hashes WHERE id = %s", (row_id,))
                elif table == "storage_events":
                    cur.execute("DELETE FROM storage_events WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def seed_task(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, Any]],
):  # type: ignore[no-untyped-def]
    """Insert a task row; returns a function taking (status, completed_at)."""

    def _seed(
        status: str = "completed",
        completed_at: datetime | None = datetime(2025, 3, 1, tzinfo=timezone.utc),
    ) -> str:
        task_id = f"it-{uuid.uuid4().hex[:12]}"
        db_conn.execute(
            "INSERT INTO tasks (id, status, completed_at) VALUES (%s, %s, %s)",
            (task_id, status, completed_at),
        )
        db_conn.commit()
        integration_cleanup.append(("tasks", task_id))
        return task_id

    return _seed
