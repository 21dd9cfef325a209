import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from ingest.consolidation.models import RecordFamily
from ingest.database.models import JobRecord
from ingest.processor.models import IngestionOutcome
from ingest.worker.job_runner import JobRunner


def _make_runner(
    max_attempts: int = 3,
    outcome: IngestionOutcome | None = None,
) -> tuple[JobRunner, MagicMock, MagicMock, MagicMock]:
    """Create a JobRunner with mocked dependencies."""
    mock_processor = MagicMock()
    mock_processor.ingest = AsyncMock(
        return_value=outcome
        or IngestionOutcome(success=True, record_family=RecordFamily.EXPENSE, record_id=42)
    )
    mock_repo = MagicMock()
    mock_repo.mark_done = AsyncMock()
    mock_repo.mark_failed = AsyncMock()
    mock_repo.increment_attempts = AsyncMock()
    mock_loader = MagicMock()
    mock_loader.load.return_value = b"%PDF bytes"
    settings = MagicMock(max_job_attempts=max_attempts)
    runner = JobRunner(mock_processor, mock_repo, mock_loader, settings)
    return runner, mock_processor, mock_repo, mock_loader


def _make_job(attempts: int = 0) -> JobRecord:
    return JobRecord(
        id=1,
        owner_id="owner-10",
        record_family=RecordFamily.EXPENSE,
        document_uuid="abc-123",
        file_name="fuel.pdf",
        mime_type="application/pdf",
        status="processing",
        attempts=attempts,
    )


def _failed(retryable: bool, reason: str | None = None) -> IngestionOutcome:
    return IngestionOutcome(
        success=False,
        record_family=RecordFamily.EXPENSE,
        error_code="upstream_unavailable" if retryable else "validation_rejected",
        rejection_reason=reason,
        error_message="boom",
        retryable=retryable,
    )


class TestSuccessfulProcessing:
    @pytest.mark.asyncio
    async def test_builds_upload_request(self) -> None:
        runner, mock_processor, _repo, mock_loader = _make_runner()
        job = _make_job()

        await runner.run(job)

        mock_loader.load.assert_called_once_with(job)
        request = mock_processor.ingest.await_args.args[0]
        assert request.owner_id == "owner-10"
        assert request.record_family is RecordFamily.EXPENSE
        assert request.file_name == "fuel.pdf"
        assert request.file_bytes == b"%PDF bytes"

    @pytest.mark.asyncio
    async def test_marks_job_done(self) -> None:
        runner, _processor, mock_repo, _loader = _make_runner()

        await runner.run(_make_job())

        mock_repo.mark_done.assert_awaited_once_with(1, 42)


class TestRejection:
    @pytest.mark.asyncio
    async def test_marks_failed_with_reason(self) -> None:
        runner, _processor, mock_repo, _loader = _make_runner(
            outcome=_failed(False, "placeholder_vendor")
        )

        await runner.run(_make_job())

        mock_repo.mark_failed.assert_awaited_once_with(1, "placeholder_vendor", "boom")
        mock_repo.increment_attempts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_error_code(self) -> None:
        runner, _processor, mock_repo, _loader = _make_runner(outcome=_failed(False))

        await runner.run(_make_job())

        mock_repo.mark_failed.assert_awaited_once_with(1, "validation_rejected", "boom")


class TestRetryableBelowMax:
    @pytest.mark.asyncio
    async def test_increments_attempts(self) -> None:
        runner, _processor, mock_repo, _loader = _make_runner(outcome=_failed(True))

        await runner.run(_make_job(attempts=0))

        mock_repo.increment_attempts.assert_awaited_once_with(1, "upstream_unavailable", "boom")
        mock_repo.mark_failed.assert_not_awaited()
        mock_repo.mark_done.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_retried(self) -> None:
        runner, mock_processor, mock_repo, _loader = _make_runner()
        mock_processor.ingest.side_effect = Exception("boom")

        await runner.run(_make_job(attempts=1))

        mock_repo.increment_attempts.assert_awaited_once_with(1, "unexpected_error", "boom")

    @pytest.mark.asyncio
    async def test_unexpected_exception_logs_traceback(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        runner, mock_processor, _repo, _loader = _make_runner()
        mock_processor.ingest.side_effect = RuntimeError("boom")

        with caplog.at_level(logging.ERROR, logger="ingest"):
            await runner.run(_make_job())

        records = [record for record in caplog.records if record.exc_info]
        assert len(records) == 1
        assert "Job 1 raised an unexpected error" in records[0].getMessage()
        assert records[0].exc_info[0] is RuntimeError  # type: ignore[index]

    @pytest.mark.asyncio
    async def test_missing_file_is_retried(self) -> None:
        runner, mock_processor, mock_repo, mock_loader = _make_runner()
        mock_loader.load.side_effect = FileNotFoundError("File not found: x")

        await runner.run(_make_job())

        mock_processor.ingest.assert_not_awaited()
        mock_repo.increment_attempts.assert_awaited_once()


class TestRetryableAtMax:
    @pytest.mark.asyncio
    async def test_marks_failed(self) -> None:
        runner, _processor, mock_repo, _loader = _make_runner(outcome=_failed(True))

        await runner.run(_make_job(attempts=2))

        mock_repo.mark_failed.assert_awaited_once_with(1, "upstream_unavailable", "boom")
        mock_repo.increment_attempts.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_marks_failed_when_over_max(self) -> None:
        runner, mock_processor, mock_repo, _loader = _make_runner()
        mock_processor.ingest.side_effect = Exception("boom")

        await runner.run(_make_job(attempts=5))

        mock_repo.mark_failed.assert_awaited_once_with(1, "unexpected_error", "boom")
