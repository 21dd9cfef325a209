import os
import uuid
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
import pytest_asyncio
from psycopg.rows import dict_row

from ingest.config.settings import Settings
from ingest.consolidation.models import RecordFamily
from ingest.database.connection import build_conninfo, close_pool, init_pool
from ingest.database.models import JobRecord

_SCHEMA = Path(__file__).resolve().parents[2] / "ingest" / "database" / "schema.sql"

_OWNED_TABLES = (
    "ingestion_jobs",
    "maintenance_records",
    "expenses",
)


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "fleet_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[str, None, None]:
    """Probe the test database once and make sure the schema exists."""
    conninfo = build_conninfo(test_settings)
    try:
        with psycopg.connect(conninfo, connect_timeout=3) as conn:
            conn.execute(_SCHEMA.read_text(encoding="utf-8"))
            conn.commit()
    except psycopg.Error as e:
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    yield conninfo


@pytest_asyncio.fixture
async def integration_pool(
    database: str, test_settings: Settings
) -> AsyncGenerator[None, None]:
    await init_pool(test_settings)
    try:
        yield
    finally:
        await close_pool()


@pytest.fixture
def db_conn(database: str) -> Generator[psycopg.Connection[Any], None, None]:
    with psycopg.connect(database) as conn:
        yield conn


@pytest.fixture
def owner_id(db_conn: psycopg.Connection[Any]) -> Generator[str, None, None]:
    """A fresh owner whose rows are removed after the test."""
    owner = f"test-{uuid.uuid4()}"
    yield owner
    with db_conn.cursor() as cur:
        for table in _OWNED_TABLES:
            cur.execute(f"DELETE FROM {table} WHERE owner_id = %s", (owner,))  # noqa: S608
    db_conn.commit()


@pytest.fixture
def seed_job(db_conn: psycopg.Connection[Any], owner_id: str) -> JobRecord:
    doc_uuid = str(uuid.uuid4())
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute(
            """
            INSERT INTO ingestion_jobs
            (owner_id, record_family, document_uuid, file_name, mime_type, status, attempts)
            VALUES (%s, %s, %s::uuid, %s, %s, 'pending', 0)
            RETURNING id
            """,
            (owner_id, RecordFamily.MAINTENANCE.value, doc_uuid, "invoice.pdf", "application/pdf"),
        )
        row = cur.fetchone()
        assert row is not None
    db_conn.commit()
    return JobRecord(
        id=row["id"],
        owner_id=owner_id,
        record_family=RecordFamily.MAINTENANCE,
        document_uuid=doc_uuid,
        file_name="invoice.pdf",
        mime_type="application/pdf",
        status="pending",
        attempts=0,
    )
