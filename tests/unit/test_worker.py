import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ingest.consolidation.models import RecordFamily
from ingest.database.models import JobRecord
from ingest.worker.worker import Worker


def _make_worker(max_concurrent: int = 2) -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with mocked dependencies."""
    mock_repo = MagicMock()
    mock_runner = MagicMock()
    mock_runner.run = AsyncMock()
    settings = MagicMock(job_poll_interval_seconds=0, max_concurrent_documents=max_concurrent)
    worker = Worker(mock_repo, mock_runner, settings)
    return worker, mock_repo, mock_runner


def _make_job(job_id: int = 1) -> JobRecord:
    return JobRecord(
        id=job_id,
        owner_id="owner-1",
        record_family=RecordFamily.MAINTENANCE,
        document_uuid=f"doc-{job_id}",
        file_name="invoice.pdf",
        mime_type="application/pdf",
        status="processing",
        attempts=0,
    )


class TestWorkerDispatch:
    @pytest.mark.asyncio
    async def test_dispatches_job_to_runner(self) -> None:
        worker, _repo, mock_runner = _make_worker()
        job = _make_job()

        with patch.object(worker, "_try_claim_job", AsyncMock(side_effect=[job])):
            await worker.run(max_jobs=1)

        mock_runner.run.assert_awaited_once_with(job)

    @pytest.mark.asyncio
    async def test_dispatches_multiple_jobs(self) -> None:
        worker, _repo, mock_runner = _make_worker()

        with patch.object(
            worker, "_try_claim_job", AsyncMock(side_effect=[_make_job(1), _make_job(2)])
        ):
            await worker.run(max_jobs=2)

        assert mock_runner.run.await_count == 2


class TestWorkerSleep:
    @pytest.mark.asyncio
    async def test_sleeps_when_no_job(self) -> None:
        worker, _repo, mock_runner = _make_worker()
        job = _make_job()

        with (
            patch.object(worker, "_try_claim_job", AsyncMock(side_effect=[None, job])),
            patch("ingest.worker.worker.asyncio.sleep", new_callable=AsyncMock) as mock_sleep,
        ):
            await worker.run(max_jobs=1)

        mock_sleep.assert_awaited_once_with(0)
        mock_runner.run.assert_awaited_once_with(job)


class TestWorkerConcurrency:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(("limit", "expected_peak"), [(1, 1), (3, 3)])
    async def test_running_jobs_are_bounded(self, limit: int, expected_peak: int) -> None:
        worker, _repo, mock_runner = _make_worker(max_concurrent=limit)
        running = 0
        peak = 0

        async def _run(job: JobRecord) -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        mock_runner.run.side_effect = _run
        jobs = [_make_job(n) for n in range(1, 5)]
        with patch.object(worker, "_try_claim_job", AsyncMock(side_effect=jobs)):
            await worker.run(max_jobs=4)

        assert mock_runner.run.await_count == 4
        assert peak == expected_peak


class TestWorkerShutdown:
    @pytest.mark.asyncio
    async def test_cancellation_cancels_running_jobs(self) -> None:
        worker, _repo, mock_runner = _make_worker()
        started = asyncio.Event()
        cancelled: list[int] = []

        async def _run(job: JobRecord) -> None:
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(job.id)
                raise

        mock_runner.run.side_effect = _run
        claims = [_make_job(1)] + [None] * 1000
        with patch.object(worker, "_try_claim_job", AsyncMock(side_effect=claims)):
            task = asyncio.create_task(worker.run())
            await asyncio.wait_for(started.wait(), timeout=1)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert cancelled == [1]

    @pytest.mark.asyncio
    async def test_claim_errors_are_swallowed(self) -> None:
        worker, _repo, _runner = _make_worker()

        with patch(
            "ingest.worker.worker.get_connection",
            side_effect=RuntimeError("Connection pool is not initialized"),
        ):
            assert await worker._try_claim_job() is None
