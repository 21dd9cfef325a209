from typing import Any

import psycopg
from psycopg.rows import dict_row

from ingest.consolidation.models import RecordFamily
from ingest.database.connection import get_connection
from ingest.database.models import JobRecord


class JobRepository:
    """Database operations for the ingestion_jobs table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    async def claim_next_job(self, conn: psycopg.AsyncConnection[Any]) -> JobRecord | None:
        """Claim the next pending job using SELECT FOR UPDATE SKIP LOCKED."""
        async with conn.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                """
                SELECT id, owner_id, record_family, document_uuid, file_name,
                       mime_type, status, attempts
                FROM ingestion_jobs
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = await cur.fetchone()

        if row is None:
            await conn.rollback()
            return None

        await conn.execute(
            """
            UPDATE ingestion_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        await conn.commit()

        return JobRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            record_family=RecordFamily(row["record_family"]),
            document_uuid=str(row["document_uuid"]),
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            status="processing",
            attempts=row["attempts"],
        )

    async def mark_done(self, job_id: int, record_id: int | None) -> None:
        """Mark a job as done and link the record it produced."""
        async with get_connection() as conn:
            await conn.execute(
                """
                UPDATE ingestion_jobs
                SET status = 'done', record_id = %s, error_code = NULL,
                    error_message = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (record_id, job_id),
            )
            await conn.commit()

    async def mark_failed(self, job_id: int, error_code: str, error: str) -> None:
        """Mark a job as permanently failed."""
        async with get_connection() as conn:
            await conn.execute(
                """
                UPDATE ingestion_jobs
                SET status = 'failed', error_code = %s, error_message = %s,
                    updated_at = NOW()
                WHERE id = %s
                """,
                (error_code, error, job_id),
            )
            await conn.commit()

    async def increment_attempts(self, job_id: int, error_code: str, error: str) -> None:
        """Increment attempt count and return job to pending."""
        async with get_connection() as conn:
            await conn.execute(
                """
                UPDATE ingestion_jobs
                SET attempts = attempts + 1, status = 'pending',
                    error_code = %s, error_message = %s,
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error_code, error, job_id),
            )
            await conn.commit()

    async def find_by_id(self, job_id: int) -> JobRecord | None:
        """Find a job by ID. Useful for tests."""
        async with get_connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    """
                    SELECT id, owner_id, record_family, document_uuid, file_name,
                           mime_type, status, attempts, error_code, error_message,
                           record_id, locked_at, created_at, updated_at
                    FROM ingestion_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = await cur.fetchone()

        if row is None:
            return None

        return JobRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            record_family=RecordFamily(row["record_family"]),
            document_uuid=str(row["document_uuid"]),
            file_name=row["file_name"],
            mime_type=row["mime_type"],
            status=row["status"],
            attempts=row["attempts"],
            error_code=row["error_code"],
            error_message=row["error_message"],
            record_id=row["record_id"],
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
