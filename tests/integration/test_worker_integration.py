from pathlib import Path
from typing import Any

import psycopg
import pytest

from ingest.config.settings import Settings
from ingest.database.models import JobRecord
from ingest.database.repositories.job_repository import JobRepository
from ingest.processor.file_loader import FileLoader, document_file_path
from ingest.processor.processor import build_processor
from ingest.worker.job_runner import JobRunner
from ingest.worker.worker import Worker


def _job_row(db_conn: psycopg.Connection[Any], job_id: int) -> tuple[Any, ...]:
    db_conn.rollback()
    with db_conn.cursor() as cur:
        cur.execute(
            "SELECT status, error_code, attempts FROM ingestion_jobs WHERE id = %s",
            (job_id,),
        )
        row = cur.fetchone()
    assert row is not None
    return row


@pytest.mark.integration
class TestWorkerEndToEnd:
    @pytest.mark.asyncio
    async def test_offline_provider_job_is_rejected(
        self,
        integration_pool: None,
        test_settings: Settings,
        seed_job: JobRecord,
        db_conn: psycopg.Connection[Any],
        direct_invoice_pdf_bytes: bytes,
        tmp_path: Path,
    ) -> None:
        path = document_file_path(tmp_path / "files", seed_job.owner_id, seed_job.document_uuid)
        path.parent.mkdir(parents=True)
        path.write_bytes(direct_invoice_pdf_bytes)
        settings = test_settings.model_copy(
            update={
                "files_root": str(tmp_path / "files"),
                "blob_local_root": str(tmp_path / "blobs"),
                "extraction_provider": "example",
            }
        )
        job_repo = JobRepository(settings.max_job_attempts)
        runner = JobRunner(
            build_processor(settings),
            job_repo,
            FileLoader(files_root=Path(settings.files_root)),
            settings,
        )

        await Worker(job_repo, runner, settings).run(max_jobs=1)

        status, error_code, attempts = _job_row(db_conn, seed_job.id)
        assert status == "failed"
        assert error_code == "placeholder_vendor"
        assert attempts == 0

    @pytest.mark.asyncio
    async def test_missing_file_is_retried(
        self,
        integration_pool: None,
        test_settings: Settings,
        seed_job: JobRecord,
        db_conn: psycopg.Connection[Any],
        tmp_path: Path,
    ) -> None:
        settings = test_settings.model_copy(
            update={
                "files_root": str(tmp_path / "empty"),
                "blob_local_root": str(tmp_path / "blobs"),
                "extraction_provider": "example",
            }
        )
        job_repo = JobRepository(settings.max_job_attempts)
        runner = JobRunner(
            build_processor(settings),
            job_repo,
            FileLoader(files_root=Path(settings.files_root)),
            settings,
        )

        await Worker(job_repo, runner, settings).run(max_jobs=1)

        status, error_code, attempts = _job_row(db_conn, seed_job.id)
        assert status == "pending"
        assert error_code == "unexpected_error"
        assert attempts == 1
