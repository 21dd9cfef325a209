from ingest.config.settings import Settings
from ingest.database.models import JobRecord
from ingest.database.repositories.job_repository import JobRepository
from ingest.logging.logger import Log
from ingest.processor.file_loader import FileLoader
from ingest.processor.models import UploadRequest
from ingest.processor.processor import Processor


class JobRunner:
    """Run one job, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        file_loader: FileLoader,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._file_loader = file_loader
        self._settings = settings

    async def run(self, job: JobRecord) -> None:
        """Execute a single job with error handling."""
        Log.info(f"Running job {job.id} (attempt {job.attempts + 1})")
        try:
            request = UploadRequest(
                owner_id=job.owner_id,
                record_family=job.record_family,
                file_name=job.file_name,
                file_bytes=self._file_loader.load(job),
                mime_type=job.mime_type,
            )
            outcome = await self._processor.ingest(request)
        except Exception as exc:
            Log.exception(f"Job {job.id} raised an unexpected error")
            await self._handle_retryable(job, "unexpected_error", str(exc))
            return

        if outcome.success:
            await self._job_repo.mark_done(job.id, outcome.record_id)
            Log.info(
                f"Job {job.id} completed successfully: record {outcome.record_id} "
                f"(from_cache={outcome.from_cache})"
            )
        elif outcome.retryable:
            await self._handle_retryable(
                job, outcome.error_code or "upstream_unavailable", outcome.error_message or ""
            )
        else:
            code = outcome.rejection_reason or outcome.error_code or "failed"
            await self._job_repo.mark_failed(job.id, code, outcome.error_message or "")
            Log.error(f"Job {job.id} rejected: [{code}] {outcome.error_message}")

    async def _handle_retryable(self, job: JobRecord, code: str, message: str) -> None:
        """Increment attempts; mark failed if at max, otherwise back to pending."""
        Log.error(f"Job {job.id} failed: {message}")
        if job.attempts + 1 >= self._settings.max_job_attempts:
            await self._job_repo.mark_failed(job.id, code, message)
            Log.error(f"Job {job.id} permanently failed after {job.attempts + 1} attempts")
        else:
            await self._job_repo.increment_attempts(job.id, code, message)
            Log.warning(f"Job {job.id} will be retried (attempt {job.attempts + 1})")
