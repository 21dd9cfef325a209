import asyncio

from ingest.config.settings import Settings
from ingest.database.connection import get_connection
from ingest.database.models import JobRecord
from ingest.database.repositories.job_repository import JobRepository
from ingest.logging.logger import Log
from ingest.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> spawn one task per job, bounded by a semaphore."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._tasks: set[asyncio.Task[None]] = set()

    async def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs until cancelled.

        If max_jobs is set, stop claiming after that many jobs and wait for
        them to finish (for testing).
        """
        Log.info(
            f"Worker started, polling for jobs "
            f"(max {self._settings.max_concurrent_documents} concurrent)"
        )
        slots = asyncio.Semaphore(self._settings.max_concurrent_documents)
        jobs_started = 0
        try:
            while max_jobs is None or jobs_started < max_jobs:
                await slots.acquire()
                job = await self._try_claim_job()
                if job is None:
                    slots.release()
                    Log.debug("No jobs available, sleeping")
                    await asyncio.sleep(self._settings.job_poll_interval_seconds)
                    continue
                task = asyncio.create_task(self._run_job(job, slots))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
                jobs_started += 1
            if self._tasks:
                await asyncio.gather(*self._tasks)
        except asyncio.CancelledError:
            running = list(self._tasks)
            Log.info(f"Worker shutting down, cancelling {len(running)} running jobs")
            for task in running:
                task.cancel()
            await asyncio.gather(*running, return_exceptions=True)
            raise

    async def _run_job(self, job: JobRecord, slots: asyncio.Semaphore) -> None:
        try:
            await self._job_runner.run(job)
        finally:
            slots.release()

    async def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            async with get_connection() as conn:
                return await self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
