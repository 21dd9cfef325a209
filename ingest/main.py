import asyncio
from pathlib import Path

from ingest.config.settings import Settings
from ingest.database.connection import close_pool, init_pool
from ingest.database.repositories.job_repository import JobRepository
from ingest.logging.logger import Log
from ingest.processor.file_loader import FileLoader
from ingest.processor.processor import build_processor
from ingest.worker.job_runner import JobRunner
from ingest.worker.worker import Worker


async def run_worker(settings: Settings) -> None:
    """Initialize pool -> build dependencies -> run the worker loop."""
    await init_pool(settings)
    try:
        processor = build_processor(settings)
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(
            processor,
            job_repo,
            FileLoader(files_root=Path(settings.files_root)),
            settings,
        )
        worker = Worker(job_repo, job_runner, settings)
        await worker.run()
    finally:
        await close_pool()


def main() -> None:
    """Entry point."""
    settings = Settings()
    Log.configure(settings.log_level)
    try:
        asyncio.run(run_worker(settings))
    except KeyboardInterrupt:
        Log.info("Worker shut down gracefully")


if __name__ == "__main__":
    main()
