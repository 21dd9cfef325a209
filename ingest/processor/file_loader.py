from pathlib import Path

from ingest.database.models import JobRecord
from ingest.processor.exceptions import FileReadError


def document_file_path(files_root: Path, owner_id: str, document_uuid: str) -> Path:
    """Build path to an uploaded file: {files_root}/{owner_id}/{document_uuid}.pdf"""
    return files_root / owner_id / f"{document_uuid}.pdf"


class FileLoader:
    """Resolves the inbox path for a job and reads the uploaded bytes."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def load(self, job: JobRecord) -> bytes:
        """Read the uploaded file for a job.

        Raises:
            FileNotFoundError: if the file does not exist at resolved path.
            FileReadError: if the file exists but cannot be read.
        """
        path = document_file_path(self._files_root, job.owner_id, job.document_uuid)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Failed to read {path}: {exc}") from exc
